# SPDX-License-Identifier: MIT
"""Configuration loading for makemake."""

# SPDX-License-Identifier: MIT
"""Core data model and project aggregation for makemake."""

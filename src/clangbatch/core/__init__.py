# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Core models, severity vocabulary and shared runtime helpers."""

# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the assistance request workflow.

This package contains pure business logic with no side effects. Nothing
here performs I/O; callers persist results and emit notifications.
"""

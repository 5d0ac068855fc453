# SPDX-License-Identifier: Apache-2.0

"""
Request lifecycle engine for social-assistance case management.
"""

__version__ = "1.0.0"

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
terust: build every snippet on a code-snippet timeline and report the results.
"""

__version__ = "0.1.0"

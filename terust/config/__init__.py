# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Frozen, validated configuration for terust."""

# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import pluggy

hookimpl = pluggy.HookimplMarker("cbomgraph")
"""Marker to be imported and used in plugins (and for own implementations)"""

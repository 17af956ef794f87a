# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from ._algorithm import AlgorithmAsset
from ._certificate import CertificateAsset
from ._graph import AssetGraph, CryptoAsset
from ._related_material import RelatedMaterialAsset

__all__ = [
    "AlgorithmAsset",
    "CertificateAsset",
    "RelatedMaterialAsset",
    "CryptoAsset",
    "AssetGraph",
]

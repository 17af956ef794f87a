# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from __future__ import annotations

import threading
from typing import Dict, Hashable, Iterator, List, Optional, Tuple, Type, Union

import networkx as nx
from loguru import logger

from cbomgraph.errors import MergeConflictError

from ._algorithm import AlgorithmAsset
from ._certificate import CertificateAsset
from ._related_material import RelatedMaterialAsset

CryptoAsset = Union[CertificateAsset, AlgorithmAsset, RelatedMaterialAsset]


class AssetGraph:
    """A dependency graph of crypto assets keyed by bom-ref.

    The payload of every node lives in the ``asset`` attribute of the
    underlying ``networkx.DiGraph``; an edge ``u -> v`` means "u depends on v".
    Node and edge insertion order is preserved, which keeps flattening
    deterministic.

    A graph built by the subgraph builder may contain edges to bom-refs it
    doesn't hold itself. Those endpoints are stored as bare nodes without an
    ``asset`` attribute and must be resolved against the target graph when the
    subgraph is merged.

    The global graph of a scan is only changed through :meth:`merge`, which
    maintains these invariants:

        - the graph is acyclic
        - every edge endpoint holds an asset
        - no two nodes hold equivalent AlgorithmAsset payloads
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        # merge_key -> bom_ref of the first node created with that key, per asset type
        self._index: Dict[Tuple[Type, Hashable], str] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return sum(1 for _ in self.assets())

    def __contains__(self, bom_ref: str) -> bool:
        return self.has_asset(bom_ref)

    def has_asset(self, bom_ref: str) -> bool:
        return self.graph.has_node(bom_ref) and "asset" in self.graph.nodes[bom_ref]

    def get_asset(self, bom_ref: str) -> Optional[CryptoAsset]:
        if not self.graph.has_node(bom_ref):
            return None
        return self.graph.nodes[bom_ref].get("asset")

    def add_asset(self, asset: CryptoAsset) -> str:
        """Adds an asset as a new node, without any deduplication.

        Returns:
            str: The bom-ref of the added node.

        Raises:
            ValueError: If a node with the same bom-ref already holds an asset.
        """
        if self.has_asset(asset.bom_ref):
            raise ValueError(f"bom-ref {asset.bom_ref} is already used in this graph")
        self.graph.add_node(asset.bom_ref, asset=asset)
        self._remember(asset)
        return asset.bom_ref

    def add_dependency(self, dependent: str, dependency: str) -> None:
        """Records that ``dependent`` depends on ``dependency``.

        Endpoints that aren't part of this graph are kept as unresolved
        references until the graph is merged into another one.
        """
        self.graph.add_edge(dependent, dependency)

    def assets(self) -> Iterator[CryptoAsset]:
        """Iterates over all assets in node creation order."""
        for _, asset in self.graph.nodes(data="asset"):
            if asset is not None:
                yield asset

    def algorithms(self) -> List[AlgorithmAsset]:
        return [a for a in self.assets() if isinstance(a, AlgorithmAsset)]

    def certificates(self) -> List[CertificateAsset]:
        return [a for a in self.assets() if isinstance(a, CertificateAsset)]

    def related_material(self) -> List[RelatedMaterialAsset]:
        return [a for a in self.assets() if isinstance(a, RelatedMaterialAsset)]

    def dependencies_of(self, bom_ref: str) -> List[str]:
        """Returns the bom-refs a node depends on, in edge insertion order."""
        if not self.graph.has_node(bom_ref):
            return []
        return list(self.graph.successors(bom_ref))

    def edges(self) -> List[Tuple[str, str]]:
        return list(self.graph.edges())

    def unresolved_references(self) -> List[str]:
        return [node for node, asset in self.graph.nodes(data="asset") if asset is None]

    def find_equivalent_algorithm(self, algorithm: AlgorithmAsset) -> Optional[AlgorithmAsset]:
        """Finds the canonical algorithm node equivalent to ``algorithm``, if any.

        When more than one candidate matches, the first one created wins.
        """
        bom_ref = self._index.get((AlgorithmAsset, algorithm.equivalence_key()))
        if bom_ref is not None:
            return self.get_asset(bom_ref)
        return None

    def find_certificate(self, fingerprint_sha256: str) -> Optional[CertificateAsset]:
        bom_ref = self._index.get((CertificateAsset, fingerprint_sha256))
        if bom_ref is not None:
            return self.get_asset(bom_ref)
        return None

    def merge(self, subgraph: AssetGraph) -> Dict[str, str]:
        """Folds ``subgraph`` into this graph.

        Algorithms equivalent to an existing algorithm are absorbed into the
        existing node. Certificates with a known fingerprint are absorbed as
        well, with their paths added to the existing certificate; related
        material with a known key fingerprint is absorbed the same way. Every
        edge and every reference field pointing at an absorbed node is
        rewritten to point at its canonical survivor.

        The merge is all-or-nothing: if it fails, this graph is left unchanged.

        Args:
            subgraph (AssetGraph): The graph to merge in. It is not modified.

        Returns:
            Dict[str, str]: Mapping from absorbed bom-refs in ``subgraph`` to the canonical bom-refs they were merged into.

        Raises:
            MergeConflictError: If the merge would reference a node that doesn't exist, reuse a bom-ref, or create a cycle.
        """
        with self._lock:
            substitutions: Dict[str, str] = {}
            # merge keys of nodes accepted from this subgraph, so duplicates inside it collapse too
            pending_index: Dict[Tuple[Type, Hashable], str] = {}
            new_assets: List[CryptoAsset] = []
            path_updates: Dict[str, List[str]] = {}

            for asset in subgraph.assets():
                key = asset.merge_key()
                canonical = None
                if key is not None:
                    canonical = self._index.get((type(asset), key)) or pending_index.get(
                        (type(asset), key)
                    )
                if canonical is not None:
                    substitutions[asset.bom_ref] = canonical
                    if isinstance(asset, CertificateAsset):
                        path_updates.setdefault(canonical, []).extend(asset.paths)
                    logger.trace(f"[merge] {asset.bom_ref} absorbed into {canonical}")
                    continue
                if self.graph.has_node(asset.bom_ref):
                    raise MergeConflictError(f"bom-ref {asset.bom_ref} is already used in the graph")
                if key is not None:
                    pending_index[(type(asset), key)] = asset.bom_ref
                new_assets.append(asset)

            new_refs = {asset.bom_ref for asset in new_assets}
            new_edges: List[Tuple[str, str]] = []
            for dependent, dependency in subgraph.edges():
                dependent = substitutions.get(dependent, dependent)
                dependency = substitutions.get(dependency, dependency)
                for endpoint in (dependent, dependency):
                    if endpoint not in new_refs and not self.has_asset(endpoint):
                        raise MergeConflictError(
                            f"dependency {dependent} -> {dependency} references unknown node {endpoint}"
                        )
                new_edges.append((dependent, dependency))

            rewritten = [asset.with_substitutions(substitutions) for asset in new_assets]
            for asset in rewritten:
                for ref in asset.references():
                    if ref not in new_refs and not self.has_asset(ref):
                        raise MergeConflictError(f"{asset.bom_ref} references unknown node {ref}")

            for asset in rewritten:
                self.graph.add_node(asset.bom_ref, asset=asset)
            added_edges = []
            try:
                for dependent, dependency in new_edges:
                    if self.graph.has_edge(dependent, dependency):
                        continue
                    # the graph was acyclic before this edge, so only a path back can close a cycle
                    if nx.has_path(self.graph, dependency, dependent):
                        cycle = nx.shortest_path(self.graph, dependency, dependent) + [dependency]
                        raise MergeConflictError(
                            f"merge would create a dependency cycle: {' -> '.join(cycle)}"
                        )
                    self.graph.add_edge(dependent, dependency)
                    added_edges.append((dependent, dependency))
            except MergeConflictError:
                self.graph.remove_edges_from(added_edges)
                self.graph.remove_nodes_from(new_refs)
                raise

            for bom_ref, paths in path_updates.items():
                existing = self.graph.nodes[bom_ref]["asset"]
                self.graph.nodes[bom_ref]["asset"] = existing.with_paths(paths)

            self._index.update(pending_index)
            logger.trace(
                f"[merge] added {len(rewritten)} node(s) and {len(new_edges)} edge(s), "
                f"absorbed {len(substitutions)} duplicate(s)"
            )
            return substitutions

    def to_dict(self) -> dict:
        """Serializes the assets and edges of the graph, mostly useful for debugging."""
        return {
            "assets": [
                dict(asset.to_dict(encode_json=True), assetType=asset.asset_type.value)
                for asset in self.assets()
            ],
            "dependencies": [
                {"ref": dependent, "dependsOn": dependency}
                for dependent, dependency in self.graph.edges()
            ],
        }

    def _remember(self, asset: CryptoAsset) -> None:
        key = asset.merge_key()
        if key is not None:
            self._index.setdefault((type(asset), key), asset.bom_ref)

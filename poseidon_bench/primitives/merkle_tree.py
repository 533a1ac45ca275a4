"""Merkle tree commitment over Blake2b digests."""

import hashlib
from typing import List, Sequence

from .field import to_bytes

# --- Constants ---

HASH_SIZE = 32
ZERO_DIGEST = bytes(HASH_SIZE)

_LEAF_PERSON = b"pb-merkle-leaf"
_NODE_PERSON = b"pb-merkle-node"

# --- Type Aliases ---

MerkleRoot = bytes


# --- Hashing ---

def hash_leaf(values: Sequence[int]) -> bytes:
    """Digest of a leaf holding a flat sequence of field elements."""
    h = hashlib.blake2b(digest_size=HASH_SIZE, person=_LEAF_PERSON)
    h.update(len(values).to_bytes(8, "little"))
    for v in values:
        h.update(to_bytes(v))
    return h.digest()


def hash_node(children: Sequence[bytes]) -> bytes:
    h = hashlib.blake2b(digest_size=HASH_SIZE, person=_NODE_PERSON)
    for child in children:
        h.update(child)
    return h.digest()


# --- Merkle Tree ---

class MerkleTree:
    """Variable-arity Merkle tree over precomputed leaf digests.

    Nodes are stored level by level in one flat list: the leaves first,
    then each parent level, each level padded with zero digests up to a
    multiple of the arity. The root is the last node.
    """

    def __init__(self, arity: int = 2):
        if arity not in [2, 3, 4]:
            raise ValueError(f"arity must be 2, 3, or 4, got {arity}")

        self.arity = arity
        self.height = 0
        self.nodes: List[bytes] = []

    def merkelize(self, leaves: Sequence[bytes]) -> None:
        """Build the tree from leaf digests."""
        self.height = len(leaves)
        self.nodes = list(leaves)

        if self.height == 0:
            return

        pending = self.height
        next_index = 0

        while pending > 1:
            extra_zeros = (self.arity - (pending % self.arity)) % self.arity
            self.nodes.extend([ZERO_DIGEST] * extra_zeros)

            next_n = (pending + (self.arity - 1)) // self.arity
            for i in range(next_n):
                start = next_index + i * self.arity
                self.nodes.append(hash_node(self.nodes[start:start + self.arity]))

            next_index += pending + extra_zeros
            pending = next_n

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root commitment."""
        if not self.nodes:
            return ZERO_DIGEST
        return self.nodes[-1]

    @property
    def leaves(self) -> List[bytes]:
        return self.nodes[:self.height]

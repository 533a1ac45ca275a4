"""Protocol - reference proving system: params, keys, prover, verifier."""

from .backend import ReferenceBackend
from .checker import RegionChecker
from .keygen import ProvingKey, VerifyingKey, keygen_pk, keygen_vk
from .params import Params, ParamsVerifier
from .proof import MERKLE_ARITY, read_region, write_region
from .prover import create_proof
from .verifier import verify_proof

__all__ = [
    # Backend
    "ReferenceBackend",
    # Parameters
    "Params",
    "ParamsVerifier",
    # Keys
    "VerifyingKey",
    "ProvingKey",
    "keygen_vk",
    "keygen_pk",
    # Proof
    "RegionChecker",
    "write_region",
    "read_region",
    "MERKLE_ARITY",
    # Prover / Verifier
    "create_proof",
    "verify_proof",
]

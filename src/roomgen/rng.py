from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

SeedLike = Union[int, str, bytes, None]


def _to_stable_json(value: Any) -> str:
    """Stable JSON encoding for hashing.

    Ensures consistent ordering and representation across runs, which keeps seed
    derivation deterministic.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class RandomSource:
    """
    A thin wrapper around random.Random that every generation component receives
    explicitly instead of touching the process-wide random module.

    Percent rolls mirror the game's Uniform(0, 100) draws.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        if seed is not None:
            self._rng = random.Random(seed)
            logger.debug("Initialized RandomSource with deterministic seed=%s", seed)
        else:
            self._rng = random.Random()
            logger.debug("Initialized RandomSource with non-deterministic seed")

    def percent(self) -> float:
        """Draw u ~ Uniform(0, 100)."""
        return self._rng.uniform(0.0, 100.0)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("RandomSource.choice() received an empty sequence")
        return seq[self._rng.randrange(0, len(seq))]

    def shuffled(self, seq: Sequence[T]) -> List[T]:
        """Return a shuffled copy; the input is left untouched."""
        items = list(seq)
        self._rng.shuffle(items)
        return items


@dataclass(frozen=True)
class RNGManager:
    """Central deterministic RNG manager.

    Derives one RandomSource per generation stage from a master seed, so each stage
    is reproducible regardless of how many draws the other stages make.

    Usage pattern:
        rngm = RNGManager(master_seed)
        layout_rng = rngm.context_rng("room_layout", round_number)
        props_rng = rngm.context_rng("props", round_number)

    The master seed can be an int, str or bytes. It is canonicalized to bytes and
    used to derive 64-bit integer seeds via BLAKE2b.
    """

    master_seed: SeedLike

    def __post_init__(self) -> None:
        object.__setattr__(self, "_master_seed_bytes", self._canonicalize_seed(self.master_seed))
        if self.master_seed is None:
            rand = secrets.token_bytes(16)
            object.__setattr__(self, "_master_seed_bytes", rand)
            logger.info("No master seed provided; generated random seed: %s", rand.hex())
        else:
            logger.debug("Using master seed: %r", self.master_seed)

    @staticmethod
    def _canonicalize_seed(seed: SeedLike) -> bytes:
        if seed is None:
            return b""
        if isinstance(seed, bytes):
            return seed
        if isinstance(seed, bool):
            raise TypeError("Unsupported seed type: %r" % (type(seed),))
        if isinstance(seed, int):
            length = (seed.bit_length() + 7) // 8 or 1
            return seed.to_bytes(length, "big", signed=False)
        if isinstance(seed, str):
            s = seed.strip()
            if s.startswith("0x"):
                try:
                    val = int(s, 16)
                    length = (val.bit_length() + 7) // 8 or 1
                    return val.to_bytes(length, "big", signed=False)
                except ValueError:
                    return s.encode("utf-8")
            return s.encode("utf-8")
        raise TypeError("Unsupported seed type: %r" % (type(seed),))

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """Derive a 64-bit integer seed from the master seed and domain identifiers.

        Domain examples: "room_layout", "interior", "props", "spawn".
        """
        payload = {
            "domain": domain,
            "ids": identifiers,
            "master": self._master_seed_bytes.hex(),
            "algo": "blake2b-64",
            "version": 1,
        }
        data = _to_stable_json(payload).encode("utf-8")
        h = hashlib.blake2b(data, digest_size=8)
        seed_int = int.from_bytes(h.digest(), "big", signed=False)
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed_int)
        return seed_int

    def context_rng(self, domain: str, *identifiers: Any) -> RandomSource:
        return RandomSource(self.derive_seed(domain, *identifiers))

    def get_master_seed_hex(self) -> str:
        return self._master_seed_bytes.hex()


__all__ = ["RandomSource", "RNGManager", "SeedLike"]

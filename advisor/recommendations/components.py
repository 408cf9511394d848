"""
Component tier heuristics.

Each table is an ordered list of ``(substrings, score)`` rules; the first rule
with a substring contained in the lower-cased spec text wins.
"""
from __future__ import annotations

import re

Rule = tuple[tuple[str, ...], float]

CPU_TIERS: list[Rule] = [
    (("i9",), 1.0),
    (("i7",), 0.9),
    (("i5",), 0.7),
    (("i3",), 0.5),
    (("ryzen 9",), 1.0),
    (("ryzen 7",), 0.9),
    (("ryzen 5",), 0.7),
    (("ryzen 3",), 0.5),
    (("m3",), 1.0),
    (("m2",), 0.9),
    (("m1",), 0.8),
]
CPU_UNKNOWN = 0.3

GPU_TIERS: list[Rule] = [
    (("rtx 4090", "rtx 4080"), 1.0),
    (("rtx 4070", "rtx 3080"), 0.9),
    (("rtx 4060", "rtx 3070"), 0.8),
    (("rtx 3060", "gtx 1660"), 0.7),
    (("rx 7900", "rx 6900"), 0.9),
    (("rx 6700", "rx 6600"), 0.7),
    (("integrated", "intel iris"), 0.3),
]
GPU_UNKNOWN = 0.4

# (minimum GB, score), checked top-down
RAM_TIERS: list[tuple[int, float]] = [
    (32, 1.0),
    (16, 0.8),
    (8, 0.6),
    (4, 0.4),
]
RAM_FLOOR = 0.2
RAM_DEFAULT_GB = 4

STORAGE_TIERS: list[Rule] = [
    (("1tb ssd", "2tb ssd"), 1.0),
    (("512gb ssd",), 0.8),
    (("256gb ssd",), 0.6),
    (("ssd",), 0.7),
    (("hdd",), 0.3),
]
STORAGE_UNKNOWN = 0.5

_RAM_RE = re.compile(r"(\d+)\s*gb", re.IGNORECASE)
_SPACE_BEFORE_UNIT_RE = re.compile(r"(\d)\s+(gb|tb)\b", re.IGNORECASE)


def _match_tier(text: str, rules: list[Rule], default: float) -> float:
    lower = text.lower()
    for needles, score in rules:
        if any(n in lower for n in needles):
            return score
    return default


def score_cpu(processor: str) -> float:
    return _match_tier(processor, CPU_TIERS, CPU_UNKNOWN)


def score_gpu(graphics: str) -> float:
    return _match_tier(graphics, GPU_TIERS, GPU_UNKNOWN)


def extract_ram_gb(ram: str) -> int:
    match = _RAM_RE.search(ram)
    return int(match.group(1)) if match else RAM_DEFAULT_GB


def score_ram(ram: str) -> float:
    size = extract_ram_gb(ram)
    for minimum, score in RAM_TIERS:
        if size >= minimum:
            return score
    return RAM_FLOOR


def score_storage(storage: str) -> float:
    # "512 GB SSD" and "512GB SSD" should hit the same rule
    compact = _SPACE_BEFORE_UNIT_RE.sub(r"\1\2", storage)
    return _match_tier(compact, STORAGE_TIERS, STORAGE_UNKNOWN)


def has_ssd(storage: str | None) -> bool:
    return bool(storage) and "ssd" in storage.lower()


def has_dedicated_gpu(graphics: str | None) -> bool:
    return bool(graphics) and "integrated" not in graphics.lower()

"""Benchmark offline — Observation Masking (offload + troncature).

But:
- Mesurer le gain tokens/chars avant/après masking sur une fixture de messages chat.

Contraintes:
- Zéro réseau (hors chargement initial de l'encodage tiktoken)
- Les fichiers d'observations sont écrits dans un répertoire temporaire
- Output stable (option --json)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path

# Permet d'exécuter le script sans installer le package
import sys

_REPO_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _REPO_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from observation_offload.core.storage import StaticHistoryDir
from observation_offload.features.observation_masking import (
    MaskingPolicy,
    ObservationMaskingService,
    mask_chat_messages,
)


@dataclass(frozen=True)
class BenchResult:
    protection_threshold: int
    hysteresis_threshold: int
    masked_tool_results: int
    tool_chars_before: int
    tool_chars_after: int
    tokens_saved: int


def _sum_tool_chars(messages: list[dict[str, object]]) -> int:
    total = 0
    for msg in messages:
        if msg.get("role") != "tool":
            continue
        content = msg.get("content")
        if isinstance(content, str):
            total += len(content)
    return total


async def run_benchmark(*, fixture_path: Path, policy: MaskingPolicy, json_output: bool) -> int:
    payload = json.loads(fixture_path.read_text(encoding="utf-8"))
    messages_obj = payload.get("messages")
    if not isinstance(messages_obj, list):
        raise ValueError("Fixture invalide: clé 'messages' manquante ou non-list")

    messages: list[dict[str, object]] = [m for m in messages_obj if isinstance(m, dict)]
    tool_chars_before = _sum_tool_chars(messages)

    service = ObservationMaskingService(policy=policy)
    with tempfile.TemporaryDirectory(prefix="obs_offload_bench_") as tmp_dir:
        masked_messages, masking = await mask_chat_messages(messages, service, StaticHistoryDir(tmp_dir))

    result = BenchResult(
        protection_threshold=policy.protection_threshold,
        hysteresis_threshold=policy.hysteresis_threshold,
        masked_tool_results=masking.masked_count,
        tool_chars_before=tool_chars_before,
        tool_chars_after=_sum_tool_chars(masked_messages),
        tokens_saved=masking.tokens_saved,
    )

    if json_output:
        print(json.dumps(asdict(result), ensure_ascii=False))
    else:
        delta_chars = result.tool_chars_before - result.tool_chars_after
        print("Benchmark Observation Masking")
        print(f"Fixture: {fixture_path}")
        print(f"seuils: protection={policy.protection_threshold} hystérésis={policy.hysteresis_threshold}")
        print(f"tool_results masqués: {result.masked_tool_results}")
        print(f"tool chars: {result.tool_chars_before} -> {result.tool_chars_after} (delta={delta_chars})")
        print(f"tokens économisés: ~{result.tokens_saved}")

    return 0


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--fixture",
        type=Path,
        required=True,
        help="Chemin vers la fixture JSON ({\"messages\": [...]})",
    )
    parser.add_argument(
        "--protection-threshold",
        type=int,
        default=MaskingPolicy.protection_threshold,
        help="Tokens d'observations récentes protégés (défaut: 50000)",
    )
    parser.add_argument(
        "--hysteresis-threshold",
        type=int,
        default=MaskingPolicy.hysteresis_threshold,
        help="Total prunable minimum avant masking (défaut: 30000)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Sortie JSON stable (utile CI)",
    )
    args = parser.parse_args()

    policy = MaskingPolicy(
        protection_threshold=max(0, args.protection_threshold),
        hysteresis_threshold=max(0, args.hysteresis_threshold),
    )
    return asyncio.run(run_benchmark(fixture_path=args.fixture, policy=policy, json_output=args.json))


if __name__ == "__main__":
    raise SystemExit(main())

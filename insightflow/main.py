from __future__ import annotations

import asyncio
import sys

from .analytics.models import Dataset
from .config import get_settings
from .integrations import LLMClient
from .services import InsightService
from .workbook import load_workbook


def print_profiles(dataset: Dataset) -> None:
    print(f"{dataset.file_name}: {len(dataset.sheets)} sheet(s), {dataset.total_rows} row(s)")
    for sheet in dataset.sheets:
        print(f"\n[{sheet.sheet_name}] {sheet.row_count} row(s)")
        for c in sheet.columns:
            samples = ", ".join(str(v) for v in c.sample_values)
            print(f"  {c.name:<24} {c.type:<8} distinct={c.distinct_count:<6} range={c.range_label:<20} e.g. {samples}")


async def ask_async(service: InsightService, dataset: Dataset, question: str, sheet_name: str | None = None) -> str:
    answer = ""
    async for ev in service.stream_answer(dataset, question, sheet_name):
        if ev.event_type == "token":
            answer += ev.data["text"]
        elif ev.event_type == "error":
            answer = ev.data["message"]
    return answer


def run_cli(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python -m insightflow.main <workbook.xlsx|.xls|.csv> [sheet name]")
        raise SystemExit(2)

    dataset = load_workbook(args[0])
    sheet_name = args[1] if len(args) > 1 else None
    print_profiles(dataset)

    s = get_settings()
    service = InsightService(s, LLMClient(s.llm_base_url, s.model_name, s.request_timeout_s))
    while True:
        q = input("\nQuestion: ")
        if q.lower() in {"exit", "quit"}:
            break
        answer = asyncio.run(ask_async(service, dataset, q, sheet_name))
        print(f"\nAI: {answer}")


if __name__ == "__main__":
    run_cli()

import argparse
import json
from pathlib import Path

from volleycoach.analysis.intent import classify_question
from volleycoach.analysis.retrieval import retrieve
from volleycoach.analysis.season_facts import build_season_facts
from volleycoach.config.bounds import DEFAULT_BOUNDS
from volleycoach.config.settings import load_settings
from volleycoach.core.errors import DataUnavailableError, ValidationError
from volleycoach.narrative import compact_facts
from volleycoach.service import answer_question
from volleycoach.store import InMemoryStore


FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def run(question: str, fixture: Path, team_id: str = None, season: str = None, show_facts: bool = False) -> int:
    settings = load_settings()
    store = InMemoryStore.from_json_file(fixture)
    scope = settings.scope(team_id, season)

    try:
        result = answer_question(question, store, scope, settings, DEFAULT_BOUNDS)
    except (ValidationError, DataUnavailableError) as exc:
        print(f"[ERROR] {exc}")
        return 1

    print(f"[{result.intent.value}] ({result.source.value})")
    print(result.text)

    if show_facts:
        classification = classify_question(question)
        data = retrieve(store, scope, question, classification.intent, classification.narrow, DEFAULT_BOUNDS)
        facts = compact_facts(build_season_facts(data), scope, DEFAULT_BOUNDS)
        print()
        print("[FACTS]")
        print(json.dumps(facts, indent=2, ensure_ascii=False))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="VolleyCoach season question answering")
    parser.add_argument("question", help="coach question, e.g. \"who has the best passer rating?\"")
    parser.add_argument("--fixture", default=str(FIXTURES_DIR / "demo_season.json"), help="season JSON fixture")
    parser.add_argument("--team-id", default=None)
    parser.add_argument("--season", default=None)
    parser.add_argument("--show-facts", action="store_true", help="print the compacted facts used for enrichment")
    args = parser.parse_args()
    raise SystemExit(run(args.question, Path(args.fixture), args.team_id, args.season, args.show_facts))


if __name__ == "__main__":
    main()

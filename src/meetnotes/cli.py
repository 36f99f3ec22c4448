"""Command-line interface for meetnotes."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from meetnotes import __version__
from meetnotes.audio import AudioCapture
from meetnotes.cloud import validate_api_key
from meetnotes.config import AI_MODES, Config, load_config, mask_api_key, save_settings
from meetnotes.errors import MeetnotesError
from meetnotes.output import write_meeting_markdown
from meetnotes.parser import parse_file
from meetnotes.pipeline import process_recording, summarize_transcript, system_status, transcribe
from meetnotes.store import MeetingStore

logger = logging.getLogger(__name__)


def _print_summary(result) -> None:
    print("## Summary")
    print(result.summary)
    for heading, items in (
        ("Key Points", result.key_points),
        ("Action Items", result.action_items),
        ("Decisions", result.decisions),
    ):
        if items:
            print(f"\n## {heading}")
            for item in items:
                print(f"- {item}")


def cmd_record(args, config: Config, store: MeetingStore) -> int:
    capture = AudioCapture()
    path = capture.start(config.recordings_dir, fmt=args.format)
    print(f"● Recording to {path} (press Enter to stop)")
    try:
        input()
    except (KeyboardInterrupt, EOFError):
        pass
    path = capture.stop()
    print(f"✓ Saved {path}")

    if args.process:
        meeting, summary = process_recording(path, config, store, title=args.title)
        print(f"✓ Meeting {meeting.id} processed with {summary.model}")
        _print_summary(summary.to_result())
    return 0


def cmd_transcribe(args, config: Config, store: MeetingStore) -> int:
    result = transcribe(args.audio, config)
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(result.text.strip())
    return 0


def cmd_summarize(args, config: Config, store: MeetingStore) -> int:
    text, metadata = parse_file(args.transcript)
    if args.mode:
        config.ai_mode = args.mode
    result, backend_name = summarize_transcript(text, config)
    logger.info(f"Summarized {metadata.get('chars', 0)} chars with {backend_name}")

    if args.json:
        print(json.dumps(result.model_dump(by_alias=True), indent=2))
    else:
        _print_summary(result)
    return 0


def cmd_process(args, config: Config, store: MeetingStore) -> int:
    meeting, summary = process_recording(args.audio, config, store, title=args.title)
    print(f"✓ Meeting {meeting.id} processed with {summary.model}")
    _print_summary(summary.to_result())
    return 0


def cmd_meetings(args, config: Config, store: MeetingStore) -> int:
    if args.action == "list":
        meetings = store.list_meetings()
    elif args.action == "search":
        meetings = store.search_meetings(args.query)
    elif args.action == "delete":
        if not store.delete_meeting(args.id):
            print(f"No meeting with id {args.id}", file=sys.stderr)
            return 1
        print(f"✓ Deleted meeting {args.id}")
        return 0
    else:
        details = store.get_meeting_details(args.id)
        if details is None:
            print(f"No meeting with id {args.id}", file=sys.stderr)
            return 1
        meeting, transcript, summary = details
        print(f"# {meeting.title} ({meeting.status})")
        print(f"Date: {meeting.date}  Audio: {meeting.audio_path}")
        if summary:
            print()
            _print_summary(summary.to_result())
        if transcript and args.transcript:
            print("\n## Transcript")
            print(transcript.text)
        return 0

    for meeting in meetings:
        print(f"{meeting.id}\t{meeting.created_at[:16]}\t{meeting.status}\t{meeting.title}")
    return 0


def cmd_export(args, config: Config, store: MeetingStore) -> int:
    details = store.get_meeting_details(args.id)
    if details is None or details[2] is None:
        print(f"No summarized meeting with id {args.id}", file=sys.stderr)
        return 1
    meeting, transcript, summary = details
    path = write_meeting_markdown(
        meeting,
        summary.to_result(),
        args.output_dir or str(config.notes_dir),
        backend_name=summary.model,
        transcript=transcript if args.transcript else None,
    )
    print(f"✓ Wrote {path}")
    return 0


def cmd_status(args, config: Config, store: MeetingStore) -> int:
    print(json.dumps(system_status(config), indent=2))
    return 0


def cmd_config(args, config: Config, store: MeetingStore) -> int:
    if args.action != "show" and not args.value:
        print(f"✗ {args.action} needs a value", file=sys.stderr)
        return 1

    if args.action == "set-key":
        if not validate_api_key(args.value):
            print("✗ Invalid API key", file=sys.stderr)
            return 1
        config.openai_api_key = args.value
    elif args.action == "set-mode":
        if args.value not in AI_MODES:
            print(f"✗ Mode must be one of: {', '.join(AI_MODES)}", file=sys.stderr)
            return 1
        config.ai_mode = args.value
    elif args.action == "set-model":
        config.ollama_model = args.value
    else:
        print(json.dumps({
            "ai_mode": config.ai_mode,
            "openai_api_key": mask_api_key(config.openai_api_key),
            "has_api_key": config.has_api_key,
            "whisper_model": config.whisper_model,
            "summarization_model": config.summarization_model,
            "ollama_model": config.ollama_model,
            "data_dir": config.data_dir,
        }, indent=2))
        return 0

    path = save_settings(config)
    print(f"✓ Saved {path}")
    return 0


COMMANDS = {
    "record": cmd_record,
    "transcribe": cmd_transcribe,
    "summarize": cmd_summarize,
    "process": cmd_process,
    "meetings": cmd_meetings,
    "export": cmd_export,
    "status": cmd_status,
    "config": cmd_config,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meetnotes", description="Record, transcribe, and summarize meetings")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("record", help="Record system audio until Enter is pressed")
    p.add_argument("--format", choices=["webm", "mp3", "wav"], default="webm")
    p.add_argument("--title", default="")
    p.add_argument("--process", action="store_true", help="Transcribe and summarize afterwards")

    p = sub.add_parser("transcribe", help="Transcribe an audio file")
    p.add_argument("audio")
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("summarize", help="Summarize a transcript file")
    p.add_argument("transcript")
    p.add_argument("--mode", choices=AI_MODES)
    p.add_argument("--json", action="store_true")

    p = sub.add_parser("process", help="Transcribe, summarize, and store a recording")
    p.add_argument("audio")
    p.add_argument("--title", default="")

    p = sub.add_parser("meetings", help="Browse stored meetings")
    actions = p.add_subparsers(dest="action", required=True)
    actions.add_parser("list")
    a = actions.add_parser("show")
    a.add_argument("id", type=int)
    a.add_argument("--transcript", action="store_true")
    a = actions.add_parser("search")
    a.add_argument("query")
    a = actions.add_parser("delete")
    a.add_argument("id", type=int)

    p = sub.add_parser("export", help="Write a meeting's notes as markdown")
    p.add_argument("id", type=int)
    p.add_argument("--output-dir", default="")
    p.add_argument("--transcript", action="store_true", help="Include the full transcript")

    sub.add_parser("status", help="Show backend availability")

    p = sub.add_parser("config", help="Show or change settings")
    p.add_argument("action", choices=["show", "set-key", "set-mode", "set-model"])
    p.add_argument("value", nargs="?", default="")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    config.verbose = config.verbose or args.verbose
    logging.basicConfig(
        level=logging.INFO if config.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config.ensure_dirs()
    store = MeetingStore(config.data_dir)

    try:
        store.initialize()
        return COMMANDS[args.command](args, config, store)
    except (MeetnotesError, FileNotFoundError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

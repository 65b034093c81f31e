import argparse
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from mediscan.classification.exceptions import ReferenceRangeError
from mediscan.config.settings import Settings
from mediscan.logging.logger import Log
from mediscan.processor.exceptions import ProcessorError
from mediscan.processor.file_store import report_file_path
from mediscan.processor.pipeline import ReportContext
from mediscan.processor.processor import build_analyze_processor, build_export_processor
from mediscan.rendering.exceptions import RenderError
from mediscan.report.exceptions import ReportRequestError
from mediscan.report.models import SubjectInfo

STAMP_FORMAT = "%Y%m%d_%H%M%S"

# Errors that end a run with a message instead of a traceback.
HANDLED_ERRORS = (
    ProcessorError,
    ReportRequestError,
    ReferenceRangeError,
    RenderError,
    ValueError,
)


def cmd_export(args: argparse.Namespace, settings: Settings) -> int:
    request_path = Path(args.request)
    output_path = (
        Path(args.output)
        if args.output
        else Path(settings.output_dir) / f"{request_path.stem}.pdf"
    )
    processor = build_export_processor(settings)
    context = processor.process(
        ReportContext(output_path=output_path, request_path=request_path)
    )
    print(context.output_path)
    return 0


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    generated_at = datetime.now()
    subject = SubjectInfo(name=args.subject_name, subject_id=args.subject_id or "")
    output_path = (
        Path(args.output)
        if args.output
        else report_file_path(
            Path(settings.output_dir), subject.name, generated_at.strftime(STAMP_FORMAT)
        )
    )
    processor = build_analyze_processor(settings)
    context = processor.process(
        ReportContext(
            output_path=output_path,
            upload_paths=[Path(p) for p in args.files],
            subject=subject,
            generated_at=generated_at,
        )
    )
    print(context.output_path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediscan", description="Classify lab parameters and render paginated PDF reports"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Render a report from a JSON request file")
    export.add_argument("request", help="Path to the request JSON")
    export.add_argument("-o", "--output", required=False, help="Output PDF path")
    export.set_defaults(func=cmd_export)

    analyze = sub.add_parser("analyze", help="Extract uploaded lab PDFs and render a report")
    analyze.add_argument("files", nargs="+", help="Lab report PDFs")
    analyze.add_argument("--subject-name", required=True, help="Name printed on the report")
    analyze.add_argument("--subject-id", required=False, help="Optional subject identifier")
    analyze.add_argument("-o", "--output", required=False, help="Output PDF path")
    analyze.set_defaults(func=cmd_analyze)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point: parse arguments -> load settings -> run one pipeline."""
    args = build_parser().parse_args(argv)
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"error: invalid configuration: {exc}", file=sys.stderr)
        return 2
    Log.configure(settings.log_level)

    try:
        return int(args.func(args, settings))
    except HANDLED_ERRORS as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

"""Application entry point for the survey API."""

from __future__ import annotations

import argparse
from logging import Logger
from pathlib import Path

from survey_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from survey_app.core.services.survey_repository import SurveyRepository
from survey_app.core.survey_exporter import save_survey_to_file
from survey_app.core.survey_importer import SurveyImportError, load_survey_from_file
from survey_app.core.survey_manager import SurveyManager
from survey_app.server.api_server import run_api_server
from survey_app.utils.logging_config import configure_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve surveys and score submissions.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--surveys",
        type=Path,
        default=None,
        help="Directory of *.txt survey definitions to load at startup.",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write normalized copies of the loaded surveys here and exit without serving.",
    )
    return parser.parse_args()


def load_surveys(directory: Path, repository: SurveyRepository, logger: Logger) -> dict[int, str]:
    """Add every readable survey in ``directory`` to ``repository``.

    Returns the stored test ids mapped to the file names they came from.
    """
    loaded: dict[int, str] = {}
    for path in sorted(directory.glob("*.txt")):
        try:
            imported = load_survey_from_file(path)
        except SurveyImportError as exc:
            logger.error("Skipping %s: %s", path.name, exc)
            continue
        test_id = repository.add_test(imported.test)
        loaded[test_id] = path.name
        logger.info("Loaded survey %s from %s", test_id, path.name)
    return loaded


def export_surveys(
    repository: SurveyRepository,
    loaded: dict[int, str],
    target_dir: Path,
    logger: Logger,
) -> list[Path]:
    written: list[Path] = []
    for test_id, file_name in loaded.items():
        test = repository.load_test_with_questions(test_id)
        if test is None:
            continue
        target = target_dir / file_name
        save_survey_to_file(target, test)
        logger.info("Exported survey %s to %s", test_id, target)
        written.append(target)
    return written


def main() -> None:
    """Initialize logging, load survey definitions, and start the API server."""
    args = _parse_args()
    logger = configure_logging()

    repository = SurveyRepository()
    loaded = load_surveys(args.surveys, repository, logger) if args.surveys is not None else {}

    if args.export_dir is not None:
        export_surveys(repository, loaded, args.export_dir, logger)
        return

    manager = SurveyManager(repository, logger=logger.getChild("manager"))
    logger.info("Starting survey API on %s:%s", args.host, args.port)
    run_api_server(manager, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

"""The main entry point for pytest fixtures.

This will run before any tests are executed when `import pytest` is called.
"""

from __future__ import annotations

import logging
import shutil
import textwrap
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest
from loguru import logger

from dialog_simulation_engine.core.constants import DIALOGS_FPATH

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"


def _setup_logging() -> None:
    """Add a file sink to the default pytest console logging."""
    # logs/pytest_YYYYMMDD.log
    logs_dir = Path(__file__).resolve().parent.parent / "logs"
    logs_dir.mkdir(exist_ok=True)
    logfile = logs_dir / f"pytest_{datetime.now():%Y%m%d}.log"

    logger.add(
        logfile,
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    # Intercept stdlib logging so everything funnels through Loguru
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = logging.getLevelName(record.levelno)
            logger.opt(depth=6, exception=record.exc_info, colors=False).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def pytest_configure(config: pytest.Config) -> None:
    """Pytest configuration hook to add a file sink to default pytest logging."""
    _setup_logging()


def _write_yaml(path: Path, body: str) -> None:
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a YAML file inside tmp_path and gives you a path to it.

    Returns:
      a function you can call with (filename, body)
    """

    def _write(filename: str, body: str) -> Path:
        file_path = tmp_path / filename
        _write_yaml(file_path, body)
        return file_path

    return _write


SCENARIO_YML = """
title: Scenario
root_node_id: intro
metrics: [empathy]
participants:
  victim:
    name: Victim
    emotional_state: distressed
nodes:
  intro:
    participant_id: victim
    message: Help me, please.
    options:
      - id: to-details
        text: Sit down, tell me what happened.
        next_node_id: details
        metrics: {empathy: 1}
        feedback: Good start.
        is_correct: true
      - id: to-end
        text: Not my problem.
        next_node_id: end
        metrics: {empathy: -1}
        feedback: Dismissive.
  details:
    participant_id: victim
    emotional_state: calm
    message: It started with a call.
    options:
      - id: wrap-up
        text: We'll take it from here.
        next_node_id: end
  end:
    participant_id: victim
    message: Goodbye.
"""


@pytest.fixture
def dialogs_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """A dialogs directory holding a copy of the built-in dialogs and schema."""
    target = tmp_path_factory.mktemp("dialogs")
    for p in DIALOGS_FPATH.iterdir():
        if p.is_file():
            shutil.copy(p, target / p.name)
    _write_yaml(target / "scenario.yml", SCENARIO_YML)
    return target

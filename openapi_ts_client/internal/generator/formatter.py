"""Форматирование итогового TypeScript кода"""

import logging
import re
import subprocess
from typing import List, Optional

from ...exceptions import FormatterError

logger = logging.getLogger(__name__)

PRETTIER_OPTIONS = [
    "--parser",
    "typescript",
    "--tab-width",
    "2",
    "--print-width",
    "120",
    "--prose-wrap",
    "never",
    "--single-quote",
    "--no-semi",
    "--trailing-comma",
    "es5",
    "--end-of-line",
    "auto",
]


class BasicFormatter:
    """Чистка пробелов без разбора кода, результат детерминирован"""

    def format(self, source: str) -> str:
        lines = [line.rstrip() for line in source.replace("\r\n", "\n").split("\n")]
        text = "\n".join(lines).strip("\n")
        return re.sub(r"\n{3,}", "\n\n", text) + "\n"


class PrettierFormatter:
    """Форматирование через prettier CLI (нужен Node.js)"""

    def __init__(self, command: Optional[List[str]] = None, timeout: int = 120):
        self.command = command or ["npx", "--yes", "prettier"]
        self.timeout = timeout

    def format(self, source: str) -> str:
        cmd = [*self.command, *PRETTIER_OPTIONS, "--stdin-filepath", "api.ts"]
        logger.debug("Запуск prettier: %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                input=source,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise FormatterError(f"prettier не найден: {self.command[0]}") from e
        except subprocess.CalledProcessError as e:
            raise FormatterError(f"prettier завершился с ошибкой:\n{e.stderr}") from e
        except subprocess.TimeoutExpired as e:
            raise FormatterError("prettier не уложился в таймаут") from e

        return result.stdout

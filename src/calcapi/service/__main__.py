"""
Evaluates one expression from the command line.

    python -m calcapi.service "x := 3; x * x"

Settings come from the `CALC_*` environment variables.
"""

import logging
import sys
from typing import List, Optional

from .calculator import Calculator
from .config import CalculatorConfig

CLI_CLIENT_ID = "cli"


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    config = CalculatorConfig.from_env()
    logging.basicConfig(level=config.log_level.upper())

    response = Calculator(config).calculate(" ".join(args), CLI_CLIENT_ID)
    if response.error is not None:
        print(response.error_context or response.error, file=sys.stderr)
        return 1

    print(response.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""taskw CLI - generate Fiber routes and Wire provider sets for Go projects.

Uses tyro for type-driven CLI generation from dataclasses.
"""

from __future__ import annotations

from typing import Annotated

import tyro

from taskw.cli.commands.clean import Clean
from taskw.cli.commands.generate import (
    Generate,
    GenerateDeps,
    GenerateRoutes,
    GenerateSwagger,
)
from taskw.cli.commands.init import Init
from taskw.cli.commands.scan import Scan

# Type aliases for subcommand annotations
_Scan = Annotated[Scan, tyro.conf.subcommand("scan")]
_Generate = Annotated[Generate, tyro.conf.subcommand("generate")]
_GenerateRoutes = Annotated[
    GenerateRoutes, tyro.conf.subcommand("generate:routes")
]
_GenerateDeps = Annotated[GenerateDeps, tyro.conf.subcommand("generate:deps")]
_GenerateSwagger = Annotated[
    GenerateSwagger, tyro.conf.subcommand("generate:swagger")
]
_Clean = Annotated[Clean, tyro.conf.subcommand("clean")]
_Init = Annotated[Init, tyro.conf.subcommand("init")]

Command = (
    _Scan
    | _Generate
    | _GenerateRoutes
    | _GenerateDeps
    | _GenerateSwagger
    | _Clean
    | _Init
)


def main() -> int:
    """Entry point for the CLI."""
    # configure structlog (respects TASKW_DEBUG env var)
    from taskw.logging_config import configure_logging

    configure_logging()

    try:
        cmd = tyro.cli(
            Command,
            prog="taskw",
            description="Generate Fiber routes and Wire providers from Go code.",
        )
        return cmd.run()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        from taskw import console

        console.error(str(e))
        return 1

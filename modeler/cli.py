"""
명령줄 인터페이스
설정 우선순위: CLI 인자 > --config YAML 파일 > 환경 변수(.env 포함) > 기본값
"""

import argparse
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from modeler import __version__
from modeler.config import RunConfig, config_from_env, load_config_file
from modeler.errors import ConfigError, ModelerError
from modeler.pipeline import run_conversion
from utils.logger import set_verbosity, setup_logger

logger = setup_logger("modeler")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

MANUAL = """\
modeler-ddl - convert a fragmented XML schema design into SQL DDL and JSON

The model root (-m) is a fragment file or a directory searched recursively for
fragment files (*.xml by default, see --ext). Fragments may contain <Table>,
<Column>, <Domain> and <Relationship> elements, each carrying a design ID
("id" attribute). Objects may be split across files and reference each other
by ID; references are resolved after every fragment has been read.

DDL is generated only when a types file (-t) is given. The types file maps
logical types to native type templates per platform, e.g.

    <types>
      <platform name="Oracle Database 12c">
        <type logical="varchar" native="VARCHAR2({length})"/>
      </platform>
    </types>

The platform (-p) is matched case-insensitively against the types file.
CREATE TABLE statements are emitted first, then every foreign key as
ALTER TABLE ... ADD FOREIGN KEY.

Environment (also read from .env): MODELER_PLATFORM, MODELER_TYPES,
MODELER_WORKERS.

Exit status: 0 on success, 2 on invalid or missing parameters, 1 on any
conversion error.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modeler-ddl",
        description="Convert a fragmented XML schema design into SQL DDL and JSON.",
    )
    parser.add_argument("-m", "--model", dest="model_path", help="model root path (file or directory)")
    parser.add_argument("-t", "--types", dest="types_path", help="type lookup document (XML)")
    parser.add_argument("-p", "--platform", help="target platform name")
    parser.add_argument("-s", "--sql", dest="sql_path", help="SQL output path")
    parser.add_argument("-j", "--json", dest="json_path", help="JSON output path")
    parser.add_argument("-n", "--dry-run", action="store_true", default=None,
                        help="generate everything but write nothing")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="debug logging")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--workers", type=int, help="parallel fragment parsers")
    parser.add_argument("--include-comments", action="store_true", default=None,
                        help="emit COMMENT ON statements")
    parser.add_argument("--ext", dest="extensions", action="append",
                        help="fragment file extension (repeatable, default .xml)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--man", action="store_true", help="show the manual and exit")
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    config = config_from_env(os.environ)
    if args.config:
        config = load_config_file(args.config, config)
    return config.merged(
        model_path=args.model_path,
        types_path=args.types_path,
        platform=args.platform,
        sql_path=args.sql_path,
        json_path=args.json_path,
        dry_run=args.dry_run,
        verbose=args.verbose,
        workers=args.workers,
        include_comments=args.include_comments,
        extensions=tuple(args.extensions) if args.extensions else None,
    )


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if args.man:
        sys.stdout.write(MANUAL)
        return EXIT_OK

    try:
        config = resolve_config(args)
        set_verbosity(config.verbose)
        config.validate()
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_USAGE
    except ModelerError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    logger.info(f"modeler-ddl {__version__}: {config.model_path} (platform={config.platform})")
    try:
        result = run_conversion(config)
    except ModelerError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    return EXIT_OK if result.ok else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

"""Command line entry point: inspect catalogs and run local imports."""

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .core.catalog_loader import load_catalog
from .core.catalog_summary import describe_catalog
from .core.exceptions import MtlCatalogError
from .core.importer import MaterialNaming, MaterialSearch
from .core.settings import HostCapabilities, load_settings
from .host.logging_utils import configure_logging
from .host.session import ImporterSession
from .version import get_version


logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "mtl_catalog_settings.json"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtl-catalog",
        description="Resolve material catalog documents into target materials.",
    )
    parser.add_argument("--version", action="version", version=get_version())
    parser.add_argument("--debug", action="store_true", help="Log at debug level.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser("describe", help="List a catalog's contents.")
    describe.add_argument("catalog", help="Path to a catalog XML document.")

    run_import = subparsers.add_parser(
        "import", help="Import a model's materials into a local project."
    )
    run_import.add_argument("project", help="Project root directory.")
    run_import.add_argument("model", help="Model path relative to the project root.")
    run_import.add_argument(
        "--material",
        dest="materials",
        action="append",
        default=[],
        help="Material slot name on the model (repeatable). "
        "Defaults to every material in the catalog.",
    )
    run_import.add_argument(
        "--naming",
        choices=[naming.value for naming in MaterialNaming],
        default=MaterialNaming.MATERIAL_NAME.value,
        help="How material assets are named.",
    )
    run_import.add_argument(
        "--search",
        choices=[search.value for search in MaterialSearch],
        default=MaterialSearch.RECURSIVE_UP.value,
        help="Where existing material assets are looked up.",
    )
    run_import.add_argument(
        "--settings",
        default="",
        help=f"Settings JSON (defaults to <project>/{SETTINGS_FILENAME}).",
    )
    run_import.add_argument(
        "--albedo-alpha-smoothness",
        action="store_true",
        help="The shader can read smoothness from the albedo alpha channel.",
    )
    return parser


def _describe(args: argparse.Namespace) -> int:
    document = load_catalog(Path(args.catalog))
    if document is None:
        logger.error("Not a readable catalog document: %s", args.catalog)
        return 1
    print(describe_catalog(document, debug=args.debug))
    return 0


def _import(args: argparse.Namespace) -> int:
    project = Path(args.project)
    settings_path = Path(args.settings) if args.settings else project / SETTINGS_FILENAME
    settings = load_settings(settings_path)
    if settings.debug:
        configure_logging(__name__, debug=True)

    session = ImporterSession(
        project,
        settings=settings,
        capabilities=HostCapabilities(
            albedo_alpha_smoothness=args.albedo_alpha_smoothness
        ),
    )
    material_names: List[str] = list(args.materials)
    if not material_names:
        catalog_path = session.importer.catalog_path_for(args.model)
        document = session.importer.load_catalog(catalog_path)
        if document is None:
            logger.error("No catalog document found at %s", catalog_path)
            return 1
        material_names = [material.name for material in document.materials]

    results = session.import_model(
        args.model,
        material_names,
        naming=MaterialNaming(args.naming),
        search=MaterialSearch(args.search),
    )
    for name, material in results.items():
        if material is None:
            logger.info("%s: kept the default material.", name)
        else:
            logger.info("%s: imported.", name)
    for notice in session.notices:
        print(notice)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(__name__, debug=args.debug)

    try:
        if args.command == "describe":
            return _describe(args)
        return _import(args)
    except MtlCatalogError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

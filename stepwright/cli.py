from __future__ import annotations
import argparse
import asyncio
import sys
from . import __version__
from .config import PROFILES, load_settings
from .core.errors import StepwrightError
from .core.executor import ExecutionEngine
from .core.loader import load_scripts
from .core.parser import load_feature
from .core.registry import StepRegistry
from .core.types import OutcomeStatus, StepProgress
from .report import render_feature
from .tools.logs import log_event, log_path

# === Affichage ================================================================
def _print_banner(phase_label: str):
    print(f"Stepwright v{__version__} - {phase_label}")

def _print_progress(progress: StepProgress) -> None:
    print(
        f"Executing - Scenario: {progress.scenario.name} "
        f"Step ({progress.index}/{progress.count}): {progress.step.raw_text}",
        flush=True,
    )

# === Arguments ================================================================
def _argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser("stepwright", description="Stepwright: exécution de scénarios Given/When/Then")
    ap.add_argument("feature", nargs="?", help="Fichier .feature à exécuter.")
    ap.add_argument("-r", "--require", action="append", default=None, metavar="PATH",
                    help="Fichier ou dossier de définitions d'étapes (répétable). Défaut: general.step_paths.")
    ap.add_argument("--config", default="config", help="Chemin vers le dossier de configuration.")
    ap.add_argument("--profile", choices=PROFILES, default="local", help="Profil de configuration.")
    ap.add_argument("--timeout-ms", type=int, default=None, help="Timeout par défaut d'une étape (ms).")
    ap.add_argument("--no-progress", action="store_true", help="Ne pas afficher la progression étape par étape.")
    ap.add_argument("--debug", action="store_true", help="Démarrer la session de debug HTTP au lieu d'exécuter.")
    ap.add_argument("--host", default=None, help="Hôte du serveur de debug.")
    ap.add_argument("--port", type=int, default=None, help="Port du serveur de debug.")
    ap.add_argument("--version", action="store_true", help="Afficher la version et quitter.")
    return ap

def build_parser() -> argparse.ArgumentParser:
    return _argparser()

# === Main ====================================================================
def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.version:
        print(__version__)
        return 0
    if not args.feature:
        ap.error("Feature name is required.")
    if not args.feature.endswith(".feature"):
        ap.error("Expected a .feature file.")

    try:
        s = load_settings(
            config=args.config,
            profile=args.profile,
            overrides={"default_timeout_ms": args.timeout_ms, "step_paths": args.require},
        )
        log_path(s)  # nom de journal invalide: refusé avant toute exécution
    except StepwrightError as e:
        print(f"ERR: {e}", file=sys.stderr)
        return 2

    if args.debug:
        from .web.server import serve
        try:
            serve(s, args.feature, s.general.step_paths, host=args.host, port=args.port)
        except StepwrightError as e:
            print(f"ERR: {e}", file=sys.stderr)
            return 2
        return 0

    _print_banner(args.feature)
    registry = StepRegistry(default_timeout_ms=s.general.default_timeout_ms)
    try:
        files = load_scripts(registry, s.general.step_paths)
        feature = load_feature(args.feature, registry)
    except StepwrightError as e:
        # erreur de chargement: rien n'est exécuté
        print(f"ERR: {e}", file=sys.stderr)
        log_event(s, f"[run] aborted: {e}")
        return 2

    log_event(s, f"[run] start {feature.name!r} ({len(files)} script(s), {len(feature.scenarios)} scenario(s))")
    show_progress = s.report.progress and not args.no_progress
    engine = ExecutionEngine(registry, on_progress=_print_progress if show_progress else None)
    outcome = asyncio.run(engine.execute_feature(feature))

    print()
    print(render_feature(outcome, show_errors=s.report.show_errors))
    log_event(s, f"[run] finish {feature.name!r} status={outcome.status.value}")
    print(f"\nSTATUS: {outcome.status.value}")
    return 0 if outcome.status is OutcomeStatus.OK else 1

if __name__ == "__main__":
    raise SystemExit(main())

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import asyncio
import sys
from typing import List, Optional

from pydantic import ValidationError

from .anomaly.score_engine import NORMAL_STATE, score, score_contributions
from .config.settings import load_settings
from .core import metrics
from .core.error_handling import ConfigurationError
from .diagnosis.fault_ranker import rank
from .diagnosis.information_model import COMPONENTS, FAULTS
from .logging_config import setup_logging
from .runtime.telemetry_loop import TickSnapshot, build_runtime
from .schemas.telemetry import PARAMETERS, AnomalyType, TelemetryRecord
from .speech.channel import SpeechChannel
from .state_machine.diagnosis_controller import EpisodeState

CATEGORY_CHOICES = [a.value for a in AnomalyType]


def _add_record_arguments(parser: argparse.ArgumentParser) -> None:
    """Telemetry fields, defaulting to the nominal cabin state."""
    parser.add_argument("--co2", type=float, default=NORMAL_STATE["co2_ppm"], help="CO2 (ppm)")
    parser.add_argument("--o2", type=float, default=NORMAL_STATE["o2_percent"], help="O2 (%%)")
    parser.add_argument("--pressure", type=float, default=NORMAL_STATE["pressure_kPa"], help="Pressure (kPa)")
    parser.add_argument("--water", type=float, default=NORMAL_STATE["water_level_percent"], help="Water level (%%)")
    parser.add_argument("--humidity", type=float, default=NORMAL_STATE["humidity_percent"], help="Humidity (%%)")
    parser.add_argument("--airflow", type=float, default=NORMAL_STATE["airflow_m_s"], help="Airflow (m/s)")
    parser.add_argument("--scrubber", type=int, default=1, choices=[0, 1], help="Scrubber status (0 = faulted)")
    parser.add_argument("--valve", type=int, default=1, choices=[0, 1], help="Valve command (1 = open)")


def _record_from_args(args: argparse.Namespace) -> TelemetryRecord:
    return TelemetryRecord(
        timestamp=0,
        co2_ppm=args.co2,
        o2_percent=args.o2,
        pressure_kPa=args.pressure,
        water_level_percent=args.water,
        humidity_percent=args.humidity,
        scrubber_status=args.scrubber,
        airflow_m_s=args.airflow,
        valve_command_status=args.valve,
    )


def run_score(args: argparse.Namespace) -> int:
    """Score one telemetry record and show the per-term breakdown."""
    try:
        record = _record_from_args(args)
    except ValidationError as e:
        print(f"❌ Invalid telemetry: {e}")
        return 2

    value = score(record)
    print("\n🛰️  Telemetry")
    print("-" * 40)
    for field_name, meta in PARAMETERS.items():
        print(f"  {meta['name']:18s} {getattr(record, field_name):8.2f} {meta['unit']}")
    print(f"\n📈 Anomaly score: {value:.1f} / 100")
    print("-" * 40)
    for term, contribution in score_contributions(record).items():
        print(f"  {term:18s} {contribution:8.3f}")
    return 0


def run_diagnose(args: argparse.Namespace) -> int:
    """Rank candidate faults for one record and anomaly category."""
    try:
        record = _record_from_args(args)
    except ValidationError as e:
        print(f"❌ Invalid telemetry: {e}")
        return 2

    results = rank(record, args.category)
    print(f"\n🩺 Fault ranking for {AnomalyType(args.category).display_name}")
    print("-" * 60)
    for i, result in enumerate(results, 1):
        print(f"  {i}. {result.fault:28s} {result.probability * 100:5.1f}%")
        print(f"     Action: {result.recommended_action}")
    return 0


def run_faults(args: argparse.Namespace) -> int:
    """List the information model: components and their fault modes."""
    print("\n🛰️  ECLSS information model")
    print("=" * 60)
    for component in COMPONENTS.values():
        print(f"\n{component.component_id}")
        if component.monitors:
            print(f"  monitors: {', '.join(component.monitors)}")
        if component.controls:
            print(f"  controls: {', '.join(component.controls)}")
        if component.affects:
            print(f"  affects:  {', '.join(component.affects)}")
        for fault_id in component.faults:
            fault = FAULTS[fault_id]
            symptoms = ", ".join(f"{k}={v.value}" for k, v in fault.symptoms.items())
            print(f"  - {fault.name} [{symptoms}] → {fault.action}")
    return 0


def _print_tick(snapshot: TickSnapshot) -> None:
    r = snapshot.record
    print(
        f"[{snapshot.state.value:16s}] score={snapshot.score.score:5.1f} "
        f"co2={r.co2_ppm:7.1f} o2={r.o2_percent:5.2f} p={r.pressure_kPa:6.2f} "
        f"water={r.water_level_percent:5.1f} hum={r.humidity_percent:5.1f} "
        f"air={r.airflow_m_s:4.2f} scr={r.scrubber_status} valve={r.valve_command_status}"
    )
    if snapshot.new_diagnosis:
        print("  🚨 Diagnosis:")
        for result in snapshot.diagnosis:
            print(f"     {result.fault:28s} {result.probability * 100:5.1f}%  → {result.recommended_action}")


async def _run_session(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    updates = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.interval_ms is not None:
        updates["interval_ms"] = args.interval_ms
    if updates:
        settings = settings.model_copy(
            update={"telemetry": settings.telemetry.model_copy(update=updates)}
        )

    setup_logging(
        log_level=settings.logging.level,
        service_name=settings.logging.service_name,
        json_output=settings.logging.json_output,
    )

    runtime = build_runtime(settings, speech=SpeechChannel() if args.no_speech else None)
    controller = runtime.controller
    loop = runtime.loop
    diagnosed_at_tick: List[int] = []
    explained: List[int] = []

    def operator(snapshot: TickSnapshot) -> None:
        if args.inject and loop.ticks == args.inject_at:
            result = controller.inject_anomaly(args.inject)
            print(f"  💉 {result['message']}")
        if snapshot.new_diagnosis:
            diagnosed_at_tick.append(loop.ticks)
        # Explain once the diagnosis announcement has finished
        if (
            args.explain
            and controller.state is EpisodeState.DIAGNOSED
            and diagnosed_at_tick[-1] not in explained
            and not runtime.speech.is_speaking
        ):
            explained.append(diagnosed_at_tick[-1])
            explanation = controller.explain(loop.window)
            print(f"  💡 {explanation.text}")
            if explanation.correlation:
                last = explanation.correlation[-1]
                print(
                    f"     airflow vs valve over {len(explanation.correlation)} samples, "
                    f"latest: {last.airflow_m_s:.2f} m/s, valve={last.valve_command_status}"
                )
        if (
            args.auto_resolve is not None
            and controller.state is EpisodeState.DIAGNOSED
            and loop.ticks - diagnosed_at_tick[-1] >= args.auto_resolve
        ):
            result = controller.resolve_anomaly()
            print(f"  🔧 {result['message']}")

    loop.add_listener(_print_tick)
    loop.add_listener(operator)

    print(f"\n🛰️  ECLSS Guard - running {args.ticks} ticks every {settings.telemetry.interval_ms} ms")
    print("=" * 70)
    try:
        await loop.run(max_ticks=args.ticks)
    finally:
        await runtime.speech.aclose()

    if args.metrics:
        print("\n📊 Metrics")
        print("-" * 70)
        print(metrics.get_metrics_text())
    return 0


def run_session(args: argparse.Namespace) -> int:
    """Run the live telemetry loop for a fixed number of ticks."""
    try:
        return asyncio.run(_run_session(args))
    except ConfigurationError as e:
        print(f"❌ {e.message}")
        return 1
    except KeyboardInterrupt:
        print("\n⏹️  Stopped")
        return 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eclss-guard",
        description="ECLSS Guard: cabin life-support anomaly detection and diagnosis",
    )
    sub = parser.add_subparsers(dest="command")

    rp = sub.add_parser("run", help="Run the simulated telemetry loop")
    rp.add_argument("--config", "-c", help="YAML settings file")
    rp.add_argument("--ticks", "-n", type=int, default=60, help="Ticks to run (default: 60)")
    rp.add_argument("--interval-ms", type=int, help="Override the tick period")
    rp.add_argument("--seed", type=int, help="Noise seed for a reproducible run")
    rp.add_argument("--inject", choices=CATEGORY_CHOICES, help="Anomaly category to inject")
    rp.add_argument("--inject-at", type=int, default=5, help="Tick after which to inject, 1..--ticks (default: 5)")
    rp.add_argument(
        "--auto-resolve", type=int, metavar="TICKS",
        help="Resolve the diagnosis this many ticks after it was announced",
    )
    rp.add_argument("--explain", action="store_true", help="Explain each diagnosis after it is announced")
    rp.add_argument("--no-speech", action="store_true", help="Disable spoken announcements")
    rp.add_argument("--metrics", action="store_true", help="Print Prometheus metrics on exit")

    sp = sub.add_parser("score", help="Score one telemetry record")
    _add_record_arguments(sp)

    dp = sub.add_parser("diagnose", help="Rank faults for one record")
    dp.add_argument("category", choices=CATEGORY_CHOICES, help="Anomaly category")
    _add_record_arguments(dp)

    sub.add_parser("faults", help="List components and fault modes")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        if args.inject and not 1 <= args.inject_at <= args.ticks:
            parser.error(f"--inject-at must be between 1 and --ticks ({args.ticks}), got {args.inject_at}")
        return run_session(args)
    elif args.command == "score":
        return run_score(args)
    elif args.command == "diagnose":
        return run_diagnose(args)
    elif args.command == "faults":
        return run_faults(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

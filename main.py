#!/usr/bin/env python3
"""Run a headless bus network simulation from the command line.

The script plays the part of the user interface: it advances the simulation
tick by tick, starts transmissions at a fixed cadence and injects device and
bus failures at the requested ticks.
"""

import argparse
import logging
import os
from pprint import pprint
from typing import List, Optional

from bus_sim.config import SimulationConfig
from bus_sim.core.event_log import EventLog
from bus_sim.core.simulator import BusSimulator
from bus_sim.utils.logging_config import configure_logging
from bus_sim.utils.metrics import (
    calculate_fairness_index,
    save_event_log_to_csv,
    save_metrics_to_json,
)
from bus_sim.utils.visualization import plot_device_stats, save_network_visualization


def run_scenario(
    ticks: int,
    transmit_every: int,
    config: SimulationConfig,
    fail_device_at: Optional[List[int]] = None,
    fail_bus_at: Optional[int] = None,
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> BusSimulator:
    """Run a scripted scenario.

    Args:
        ticks: Number of ticks to simulate.
        transmit_every: Ticks between transmission attempts.
        config: Simulation constants.
        fail_device_at: Ticks at which a random working device fails.
        fail_bus_at: Tick at which the bus fails.
        log_file: Optional name of a file under logs/ mirroring the event log.
        verbose: Print every event log entry as it is written.

    Returns:
        The simulator in its final state.
    """
    fail_device_at = set(fail_device_at or [])
    log = EventLog(config.log_capacity, log_file)
    if verbose:
        log.subscribe(lambda entry: print(entry.format()))
    simulator = BusSimulator(config, log=log)

    for tick in range(ticks):
        if tick in fail_device_at:
            simulator.inject_device_failure()
        if fail_bus_at is not None and tick == fail_bus_at:
            simulator.inject_bus_failure()
        if transmit_every > 0 and tick % transmit_every == 0 and not simulator.bus.busy:
            simulator.start_transmission()
        simulator.tick()

    return simulator


def main():
    """Main function to run the simulation"""
    parser = argparse.ArgumentParser(description="Bus Network (CSMA/CD) Simulation")
    parser.add_argument("--ticks", type=int, default=900, help="Number of ticks to simulate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--collision-probability",
        type=float,
        default=0.3,
        help="Chance that a transmission collides",
    )
    parser.add_argument(
        "--transmit-every",
        type=int,
        default=30,
        help="Ticks between transmission attempts (0 disables)",
    )
    parser.add_argument(
        "--fail-device-at",
        type=int,
        nargs="*",
        default=[],
        help="Ticks at which a random device fails",
    )
    parser.add_argument("--fail-bus-at", type=int, default=None, help="Tick at which the bus fails")
    parser.add_argument("--output-dir", default=None, help="Directory for metrics, log and plots")
    parser.add_argument("--log-file", default=None, help="Mirror the event log to logs/<name>.log")
    parser.add_argument("--verbose", action="store_true", help="Print every event as it happens")

    args = parser.parse_args()
    configure_logging(logging.WARNING)

    config = SimulationConfig(
        collision_probability=args.collision_probability,
        seed=args.seed,
    )
    simulator = run_scenario(
        args.ticks,
        args.transmit_every,
        config,
        fail_device_at=args.fail_device_at,
        fail_bus_at=args.fail_bus_at,
        log_file=args.log_file,
        verbose=args.verbose,
    )

    metrics = simulator.calculate_metrics()
    metrics["fairness_index"] = calculate_fairness_index(simulator)

    print("\n=== Event Log ===")
    for entry in simulator.log.entries:
        print(entry.format())

    print("\n=== Metrics ===")
    pprint(metrics)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        save_metrics_to_json(metrics, os.path.join(args.output_dir, "metrics.json"))
        save_event_log_to_csv(simulator.log, os.path.join(args.output_dir, "event_log.csv"))
        save_network_visualization(simulator, os.path.join(args.output_dir, "network.png"))
        plot_device_stats(metrics, output_dir=args.output_dir)


if __name__ == "__main__":
    main()

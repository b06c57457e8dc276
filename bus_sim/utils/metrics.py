"""Metrics utilities for bus network simulation.

This module provides functions for exporting simulation metrics and the event
log, and for analyzing how evenly devices shared the bus.
"""

import csv
import json
import os
from typing import Any, Dict, Optional

import numpy as np

from bus_sim.core.event_log import EventLog
from bus_sim.core.simulator import BusSimulator


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    # JSON object keys must be strings
    serializable_metrics = {}
    for key, value in metrics.items():
        if key == "per_device":
            serializable_metrics[key] = {str(device_id): stats for device_id, stats in value.items()}
        else:
            serializable_metrics[key] = value

    with open(filename, "w") as f:
        json.dump(serializable_metrics, f, indent=2)


def save_event_log_to_csv(log: EventLog, filename: str = "results/event_log.csv") -> None:
    """Save the retained event log entries to a CSV file.

    Args:
        log: Event log to export.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Tick", "Time", "Category", "Message"])
        for entry in log.entries:
            writer.writerow(
                [entry.tick, entry.timestamp.isoformat(), entry.category.value, entry.message]
            )


def calculate_fairness_index(
    simulator: BusSimulator, sent_counts: Optional[Dict[int, int]] = None
) -> float:
    """Calculate Jain's fairness index over completed transmissions per device.

    Args:
        simulator: BusSimulator instance.
        sent_counts: Dictionary mapping device IDs to completed transmissions.
            If None, taken from the simulator's devices.

    Returns:
        Fairness index between 0 and 1 (1 is perfectly fair), or 0.0 when
        nothing was sent.
    """
    if sent_counts is None:
        sent_counts = {device.id: device.stats.sent for device in simulator.devices}

    counts = np.array(list(sent_counts.values()), dtype=float)
    if counts.size == 0:
        return 0.0

    sum_squared = float(np.sum(counts**2))
    if sum_squared == 0:
        return 0.0

    return float(np.sum(counts) ** 2 / (counts.size * sum_squared))

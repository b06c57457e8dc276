"""Visualization utilities for bus network simulation.

This module provides functions for drawing the bus topology and per-device
transmission statistics.
"""

import os
from typing import Any, Dict, Tuple

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np

from bus_sim.core.simulator import BusSimulator

BUS_NODE = "bus"


def build_topology(simulator: BusSimulator) -> nx.Graph:
    """Build the bus topology as a graph.

    Args:
        simulator: BusSimulator instance.

    Returns:
        Graph with a bus node and one node per device, each device attached to
        the bus. Nodes carry ``pos``, ``status`` and ``failed`` attributes.
    """
    graph = nx.Graph()
    bus = simulator.bus
    graph.add_node(
        BUS_NODE,
        pos=(simulator.config.canvas_width / 2, simulator.config.bus_y),
        status=bus.status.value,
        failed=bus.failed,
    )
    for device in simulator.devices:
        graph.add_node(
            device.id,
            pos=device.anchor,
            status=device.status.value,
            failed=device.failed,
        )
        graph.add_edge(device.id, BUS_NODE, failed=device.failed or bus.failed)
    return graph


def save_network_visualization(
    simulator: BusSimulator,
    filename: str | None = None,
    figsize: Tuple[int, int] = (10, 6),
    block=True,
) -> None:
    """Save bus topology visualization to a file.

    Args:
        simulator: BusSimulator instance.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
    """
    fig = plt.figure(figsize=figsize)
    ax = fig.gca()

    graph = build_topology(simulator)
    pos = nx.get_node_attributes(graph, "pos")
    # Taps run straight down or up to the bus line
    for device in simulator.devices:
        ax.plot(
            [device.x, device.x],
            [device.y, simulator.config.bus_y],
            color="red" if device.failed else "green",
            linewidth=2,
        )
    ax.plot(
        [50, simulator.config.canvas_width - 50],
        [simulator.config.bus_y] * 2,
        color="red" if simulator.bus.failed else "green",
        linewidth=4,
    )

    device_nodes = [node for node in graph.nodes if node != BUS_NODE]
    colors = [
        "salmon" if graph.nodes[node]["failed"]
        else "gold" if graph.nodes[node]["status"] == "sending"
        else "lightgreen"
        for node in device_nodes
    ]
    nx.draw_networkx_nodes(
        graph, pos, nodelist=device_nodes, node_size=900, node_shape="s", node_color=colors, ax=ax
    )
    labels = {node: f"{node}\n{graph.nodes[node]['status']}" for node in device_nodes}
    nx.draw_networkx_labels(graph, pos, labels=labels, font_size=9, ax=ax)

    for packet in simulator.packets:
        ax.plot(packet.x, packet.y, "o", color="red" if packet.is_collision else "lime")
        for _, x, y in packet.receiver_positions:
            ax.plot(x, y, "o", color="lime")

    for event in simulator.collisions:
        ax.add_patch(
            plt.Circle(
                (event.x, event.y),
                event.size / 2,
                color="red",
                alpha=max(0.0, event.alpha / 255),
            )
        )

    ax.set_title(f"Bus Status: {simulator.bus.status.value.capitalize()}")
    ax.set_xlim(0, simulator.config.canvas_width)
    ax.set_ylim(simulator.config.canvas_height, 0)
    ax.set_aspect("equal")
    plt.axis("off")
    plt.tight_layout()

    if filename:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filename)
        plt.close(fig)
    else:
        plt.show(block=block)
        if not block:
            plt.pause(0.001)


def plot_device_stats(
    metrics: Dict[str, Any],
    output_dir: str | None = None,
    show=True,
) -> None:
    """Plot and save sent, received and collision counts per device.

    Args:
        metrics: Metrics dictionary from ``BusSimulator.calculate_metrics``.
        output_dir: Directory to save the plot to.
        show: Whether to display the plot when not saving it.
    """
    per_device = metrics["per_device"]
    device_ids = list(per_device.keys())

    fig, axes = plt.subplots(1, 3, figsize=(12, 5))

    x = np.arange(len(device_ids))
    panels = [
        ("sent", "Packets Sent", None),
        ("received", "Packets Received", "orange"),
        ("collisions", "Collisions", "red"),
    ]

    for ax, (key, title, color) in zip(axes, panels):
        values = [per_device[device_id][key] for device_id in device_ids]
        ax.bar(x, values, width=0.4, color=color)
        ax.set_ylabel(title)
        ax.set_title(f"{title} per Device")
        ax.set_xlabel("Device")
        ax.set_xticks(x)
        ax.set_xticklabels([str(device_id) for device_id in device_ids])

    plt.tight_layout()

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        plt.savefig(os.path.join(output_dir, "device_stats.png"))
        plt.close(fig)
    elif show:
        plt.show()

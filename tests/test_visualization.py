from bus_sim.utils.visualization import (
    BUS_NODE,
    build_topology,
    plot_device_stats,
    save_network_visualization,
)


def test_build_topology(simulator, rng):
    rng.picks = [3]
    simulator.registry.mark_failed(simulator.registry.get(2))
    simulator.start_transmission()

    graph = build_topology(simulator)

    assert graph.number_of_nodes() == 7
    assert graph.number_of_edges() == 6
    assert all(graph.has_edge(device.id, BUS_NODE) for device in simulator.devices)
    assert graph.nodes[2]["failed"]
    assert graph.nodes[3]["status"] == "sending"
    assert graph.nodes[BUS_NODE]["status"] == "busy"
    assert graph.edges[2, BUS_NODE]["failed"]
    assert not graph.edges[1, BUS_NODE]["failed"]


def test_bus_failure_marks_every_tap(simulator):
    simulator.inject_bus_failure()
    graph = build_topology(simulator)
    assert all(data["failed"] for _, _, data in graph.edges(data=True))


def test_save_network_visualization(simulator, tmp_path):
    simulator.start_transmission()
    simulator.run(120)
    simulator.simulate_collision()
    filename = tmp_path / "plots" / "network.png"

    save_network_visualization(simulator, str(filename))

    assert filename.exists()


def test_plot_device_stats(simulator, tmp_path):
    metrics = simulator.run(10)
    plot_device_stats(metrics, output_dir=str(tmp_path))
    assert (tmp_path / "device_stats.png").exists()

"""Core components for bus network simulation.

This module contains the fundamental classes for the simulation engine,
including Device, BusChannel, Packet, the lifecycle and collision engines,
and the BusSimulator controller.
"""

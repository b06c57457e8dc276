"""Shared-medium bus network simulation.

This package models a CSMA/CD style bus network as a frame-stepped simulation:
devices transmit on a shared backbone, packets propagate in phases, collisions
abort transmissions, and devices or the backbone itself may fail.
"""

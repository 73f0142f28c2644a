"""Scenario builders for accuracy sweeps."""

from .sphere_stack import SceneHandles, build_sphere_stack_scene

__all__ = ["SceneHandles", "build_sphere_stack_scene"]

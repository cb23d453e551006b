"""Demonstration of type-specific handler lookup.

This script shows how the registry finds renderers:
1. Explicitly registered renderers
2. Renderers found by naming convention
3. Singleton vs prototype scope
4. Diagnosing a failed lookup
"""

import logging

from typespecific import HandlerRegistry, Scope


class Renderer:
    def render(self, subject) -> str:
        raise NotImplementedError


class RendererManager(HandlerRegistry[Renderer]):
    """Looks for '<Name>Renderer' in this module first."""


class Circle:
    pass


class Square:
    pass


class Polygon:
    pass


class CircleRenderer(Renderer):
    def render(self, subject) -> str:
        return "()"


class SquareRenderer(Renderer):
    def render(self, subject) -> str:
        return "[]"


def demo_renderers():
    """Walk through the registry features."""

    print("=" * 70)
    print("TYPE-SPECIFIC HANDLER DEMONSTRATION")
    print("=" * 70)

    # 1. Explicit registration
    print("\n1. Registering Renderers")
    print("-" * 70)
    manager = RendererManager()
    circle_renderer = CircleRenderer()
    manager.register(Circle, circle_renderer)
    found = manager.find(Circle)
    print(f"find(Circle) -> {found.__class__.__name__}")
    print(f"Same instance as registered: {found is circle_renderer}")
    print(f"find(Square) without convention -> {manager.find(Square)}")

    # 2. Naming convention
    print("\n2. Naming Convention")
    print("-" * 70)
    manager.set_conventional_postfix("Renderer")
    square_renderer = manager.find(Square)
    print(f"Postfix: {manager.postfix!r}, namespace: {manager.handler_namespace}")
    print(f"find(Square) -> {square_renderer.__class__.__name__}")
    print(f"Rendered: {square_renderer.render(Square())}")
    print(f"Memoized: {manager.is_registered(Square)}")

    # 3. Scopes
    print("\n3. Scopes")
    print("-" * 70)
    print(f"Singleton: same instance? {manager.find(Square) is manager.find(Square)}")
    manager.set_scope(Scope.PROTOTYPE)
    print(f"Prototype: same instance? {manager.find(Square) is manager.find(Square)}")

    # 4. Diagnostics
    print("\n4. Diagnosing Failures")
    print("-" * 70)
    resolution = manager.resolve(Polygon)
    print(f"find(Polygon) -> {manager.find(Polygon)}")
    for attempt in resolution.attempts:
        print(f"  - {attempt.describe()}")

    print("\n" + "=" * 70)
    print("✓ DEMONSTRATION COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    demo_renderers()

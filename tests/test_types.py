# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from connectkit.errors import UnknownType
from connectkit.schema.types import (
    INSTANT,
    Type,
    TypeRegistry,
    ValuePattern,
    build_default_registry,
    registry,
)
from connectkit.schema.units import Dimension


class TestTypeRegistry(unittest.TestCase):
    def test_names_are_unique(self) -> None:
        names = registry.all_names()
        self.assertEqual(len(names), len(set(names)))
        self.assertEqual(len(registry.all_types()), len(names))

    def test_resolve(self) -> None:
        weight = registry.resolve("weight")
        self.assertEqual(weight.value_pattern, ValuePattern.QUANTITY)
        self.assertEqual(weight.dimension, Dimension.MASS)
        self.assertTrue(registry.is_valid("weight"))
        self.assertFalse(registry.is_valid("bloodSugar"))

    def test_resolve_unknown(self) -> None:
        with self.assertRaises(UnknownType) as ctx:
            registry.resolve("bloodSugar")
        self.assertEqual(ctx.exception.identifier, "bloodSugar")

    def test_expand_blood_pressure(self) -> None:
        expanded = registry.expand([registry.resolve("bloodPressure")])
        self.assertEqual(
            {t.name for t in expanded},
            {"bloodPressure.systolic", "bloodPressure.diastolic"},
        )

    def test_expand_passes_simple_types_through(self) -> None:
        weight = registry.resolve("weight")
        self.assertEqual(registry.expand([weight]), frozenset({weight}))

    def test_workout_expands_to_itself_energy_and_distance(self) -> None:
        names = registry.expand_names(["workout"])
        self.assertEqual(names, ["workout", "workout.distance", "workout.energy"])
        self.assertNotIn("workout.heartRate", names)
        self.assertEqual(registry.parent_of(registry.resolve("workout.heartRate")).name, "workout")

    def test_expand_is_idempotent(self) -> None:
        for selection in (
            registry.all_types(),
            [registry.resolve("workout")],
            [registry.resolve("nutrition"), registry.resolve("sleepSession")],
            [registry.resolve("bloodPressure"), registry.resolve("weight")],
        ):
            once = registry.expand(selection)
            self.assertEqual(registry.expand(once), once)

    def test_parent_and_components(self) -> None:
        systolic = registry.resolve("bloodPressure.systolic")
        parent = registry.parent_of(systolic)
        self.assertIsNotNone(parent)
        self.assertEqual(parent.name, "bloodPressure")
        self.assertIn(systolic, registry.components_of(parent))
        self.assertIsNone(registry.parent_of(registry.resolve("weight")))
        self.assertEqual(registry.components_of(registry.resolve("weight")), ())

    def test_nutrition_components(self) -> None:
        names = registry.expand_names(["nutrition"])
        self.assertIn("nutrition.energy", names)
        self.assertIn("nutrition.protein", names)
        self.assertNotIn("nutrition", names)

    def test_platform_support(self) -> None:
        android = registry.supported_names("android")
        ios = registry.supported_names("ios")
        self.assertIn("elevation", android)
        self.assertNotIn("elevation", ios)
        self.assertIn("distanceCycling", ios)
        self.assertNotIn("distanceCycling", android)
        self.assertIn("weight", android)
        self.assertIn("weight", ios)

    def test_register_duplicate(self) -> None:
        reg = build_default_registry()
        with self.assertRaises(ValueError):
            reg.register(Type("weight", ValuePattern.QUANTITY, INSTANT, dimension=Dimension.MASS))

    def test_register_composite_needs_components(self) -> None:
        reg = TypeRegistry()
        with self.assertRaises(ValueError):
            reg.register_composite(Type("empty", ValuePattern.MULTIPLE, INSTANT), [])

    def test_expansion_must_come_from_the_composite(self) -> None:
        reg = TypeRegistry()
        parent = Type("parent", ValuePattern.MULTIPLE, INSTANT)
        child = Type("parent.child", ValuePattern.QUANTITY, INSTANT, dimension=Dimension.COUNT)
        stranger = Type("stranger", ValuePattern.QUANTITY, INSTANT, dimension=Dimension.COUNT)
        with self.assertRaises(ValueError):
            reg.register_composite(parent, [child], expands_to=[parent, stranger])
        with self.assertRaises(ValueError):
            reg.register_composite(parent, [child], expands_to=[])
        self.assertIsNone(reg.get("parent"))

        reg.register_composite(parent, [child], expands_to=[parent])
        self.assertEqual(reg.expand_names(["parent"]), ["parent"])


if __name__ == "__main__":
    unittest.main()

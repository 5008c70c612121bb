from __future__ import annotations

import unittest

from rustlambda.errors import ConfigurationError, NoMatchingUnitsError
from rustlambda.units import BuildUnit, ServiceDescriptor, select_units


def _service(provider_runtime: str | None = "rust", **functions) -> dict:
    provider = {"name": "aws"}
    if provider_runtime:
        provider["runtime"] = provider_runtime
    return {"service": "demo", "provider": provider, "functions": functions}


class BuildUnitTests(unittest.TestCase):
    def test_effective_runtime_falls_back_to_provider(self) -> None:
        unit = BuildUnit.from_mapping("hello", {"handler": "hello"}, default_runtime="rust")
        self.assertIsNone(unit.declared_runtime)
        self.assertEqual(unit.effective_runtime, "rust")
        self.assertTrue(unit.targets("rust"))

    def test_declared_runtime_wins(self) -> None:
        unit = BuildUnit.from_mapping("web", {"runtime": "nodejs18.x"}, default_runtime="rust")
        self.assertEqual(unit.effective_runtime, "nodejs18.x")
        self.assertFalse(unit.targets("rust"))

    def test_binary_from_handler(self) -> None:
        unit = BuildUnit.from_mapping("hello", {"handler": "workspace-pkg.hello-bin"}, default_runtime=None)
        self.assertEqual(unit.binary, "hello-bin")

    def test_explicit_binary_overrides_handler(self) -> None:
        unit = BuildUnit.from_mapping(
            "hello",
            {"handler": "pkg.other", "rust": {"binary": "hello"}},
            default_runtime=None,
        )
        self.assertEqual(unit.binary, "hello")

    def test_existing_artifact_is_read(self) -> None:
        unit = BuildUnit.from_mapping("hello", {"package": {"artifact": "x.zip"}}, default_runtime=None)
        self.assertEqual(unit.package_artifact, "x.zip")
        self.assertIsNone(unit.binary)


class ServiceDescriptorTests(unittest.TestCase):
    def test_string_provider_is_read_without_mutation(self) -> None:
        data = {"provider": "aws", "functions": {}}
        service = ServiceDescriptor(data)
        self.assertEqual(service.provider_name, "aws")
        self.assertIsNone(service.provider_runtime)
        self.assertEqual(data["provider"], "aws")

    def test_unknown_function_lists_available(self) -> None:
        service = ServiceDescriptor(_service(hello={"handler": "hello"}))
        with self.assertRaises(ConfigurationError) as ctx:
            service.get_function("missing")
        self.assertIn("hello", str(ctx.exception))

    def test_reading_empty_definition_leaves_it_in_place(self) -> None:
        data = _service(idle=None)
        service = ServiceDescriptor(data)
        unit = service.unit("idle")
        self.assertEqual(unit.effective_runtime, "rust")
        self.assertIsNone(data["functions"]["idle"])

        unit.package_artifact = "/tmp/idle.zip"
        service.apply(unit)
        self.assertEqual(data["functions"]["idle"], {"package": {"artifact": "/tmp/idle.zip"}})

    def test_apply_writes_back_artifact_and_runtime(self) -> None:
        data = _service(hello={"handler": "hello", "runtime": "rust"})
        service = ServiceDescriptor(data)
        unit = service.unit("hello")
        unit.package_artifact = "/tmp/hello.zip"
        unit.declared_runtime = "provided.al2"
        service.apply(unit)
        self.assertEqual(data["functions"]["hello"]["package"], {"artifact": "/tmp/hello.zip"})
        self.assertEqual(data["functions"]["hello"]["runtime"], "provided.al2")

    def test_disable_dev_dependency_filtering(self) -> None:
        data = _service()
        ServiceDescriptor(data).disable_dev_dependency_filtering()
        self.assertIs(data["package"]["excludeDevDependencies"], False)


class SelectUnitsTests(unittest.TestCase):
    def test_other_provider_skips(self) -> None:
        data = _service(hello={"handler": "hello"})
        data["provider"]["name"] = "other"
        self.assertIsNone(select_units(ServiceDescriptor(data)))

    def test_selects_only_rust_units(self) -> None:
        data = _service(
            hello={"handler": "hello"},
            web={"handler": "index.handler", "runtime": "nodejs18.x"},
            bye={"handler": "bye", "runtime": "rust"},
        )
        units = select_units(ServiceDescriptor(data))
        self.assertEqual([unit.name for unit in units], ["hello", "bye"])

    def test_single_function_option(self) -> None:
        data = _service(hello={"handler": "hello"}, bye={"handler": "bye"})
        units = select_units(ServiceDescriptor(data), function="bye")
        self.assertEqual([unit.name for unit in units], ["bye"])

    def test_no_rust_units_raises(self) -> None:
        data = _service(provider_runtime="python3.12", web={"handler": "app.handler"})
        with self.assertRaises(NoMatchingUnitsError) as ctx:
            select_units(ServiceDescriptor(data))
        self.assertIn("runtime: rust", str(ctx.exception))
        self.assertEqual(ctx.exception.runtime, "rust")

    def test_no_functions_raises(self) -> None:
        data = _service()
        with self.assertRaises(NoMatchingUnitsError):
            select_units(ServiceDescriptor(data))

    def test_rust_unit_without_binary_is_rejected(self) -> None:
        data = _service(hello={})
        with self.assertRaises(ConfigurationError) as ctx:
            select_units(ServiceDescriptor(data))
        self.assertIn("hello", str(ctx.exception))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

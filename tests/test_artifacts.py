from __future__ import annotations

from pathlib import Path
import unittest

from rustlambda.artifacts import artifact_dir_name, artifact_path, rewrite_units
from rustlambda.units import ServiceDescriptor


class ArtifactPathTests(unittest.TestCase):
    def test_dev_profile_maps_to_debug(self) -> None:
        self.assertEqual(artifact_dir_name("dev"), "debug")

    def test_other_profiles_map_to_release(self) -> None:
        for profile in (None, "release", "bench", ""):
            with self.subTest(profile=profile):
                self.assertEqual(artifact_dir_name(profile), "release")

    def test_artifact_path_layout(self) -> None:
        self.assertEqual(
            artifact_path(Path("/src"), None, "hello"),
            Path("/src/target/lambda/release/hello.zip"),
        )
        self.assertEqual(
            artifact_path(Path("/src"), "dev", "hello"),
            Path("/src/target/lambda/debug/hello.zip"),
        )


class RewriteUnitsTests(unittest.TestCase):
    def test_rewrites_units_and_provider_runtime(self) -> None:
        data = {
            "provider": {"name": "aws", "runtime": "rust"},
            "functions": {
                "hello": {"handler": "hello"},
                "bye": {"handler": "pkg.bye", "runtime": "rust", "package": {"include": ["x"]}},
            },
        }
        service = ServiceDescriptor(data)
        units = service.units()

        rewritten = rewrite_units(service, units, src_path=Path("/src"), profile="dev")

        self.assertEqual([unit.name for unit in rewritten], ["hello", "bye"])
        hello = data["functions"]["hello"]
        bye = data["functions"]["bye"]
        self.assertEqual(hello["package"]["artifact"], str(Path("/src/target/lambda/debug/hello.zip")))
        self.assertNotIn("runtime", hello)
        self.assertEqual(bye["package"], {"include": ["x"], "artifact": str(Path("/src/target/lambda/debug/bye.zip"))})
        self.assertEqual(bye["runtime"], "provided.al2")
        self.assertEqual(data["provider"]["runtime"], "provided.al2")
        self.assertTrue(all(unit.effective_runtime == "provided.al2" for unit in rewritten))

    def test_provider_runtime_left_alone_when_not_rust(self) -> None:
        data = {
            "provider": {"name": "aws", "runtime": "nodejs18.x"},
            "functions": {"hello": {"handler": "hello", "runtime": "rust"}},
        }
        service = ServiceDescriptor(data)
        rewrite_units(service, service.units(), src_path=Path("/src"), profile=None)
        self.assertEqual(data["provider"]["runtime"], "nodejs18.x")
        self.assertEqual(data["functions"]["hello"]["runtime"], "provided.al2")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

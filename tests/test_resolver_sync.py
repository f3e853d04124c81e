"""Tests for the top-level synchronous resolver."""

import os

import pytest

from resolver import (
    IncorrectPackageMainError,
    InvalidBasedirError,
    InvalidPackageMainError,
    ModuleNotFound,
    PackagePathNotExportedError,
    resolve_sync,
)
from resolver.probe import default_is_file


CONDITIONS = {"category": "conditions"}


class TestRelativeResolution:
    """Relative and absolute specifiers."""

    def test_resolves_file_with_extension(self, tree, defaults):
        root = tree({"lib/x.js": ""})
        result = resolve_sync("./lib/x", {"basedir": root}, defaults)
        assert result == os.path.join(root, "lib", "x.js")

    def test_exact_file_wins_over_extension(self, tree, defaults):
        root = tree({"lib/x": "", "lib/x.js": ""})
        assert resolve_sync("./lib/x", {"basedir": root}, defaults) == os.path.join(root, "lib", "x")

    def test_extensions_tried_in_order(self, tree, defaults):
        root = tree({"data.json": "{}", "data.node": ""})
        options = {"basedir": root, "extensions": [".node", ".json"]}
        assert resolve_sync("./data", options, defaults) == os.path.join(root, "data.node")

    def test_absolute_path(self, tree, defaults):
        root = tree({"abs.js": ""})
        target = os.path.join(root, "abs")
        assert resolve_sync(target, {"basedir": root}, defaults) == target + ".js"

    def test_dot_resolves_directory_index(self, tree, defaults):
        root = tree({"index.js": ""})
        assert resolve_sync(".", {"basedir": root}, defaults) == os.path.join(root, "index.js")

    def test_trailing_slash_skips_file_form(self, tree, defaults):
        root = tree({"lib.js": "", "lib/index.js": ""})
        assert resolve_sync("./lib/", {"basedir": root}, defaults) == os.path.join(root, "lib", "index.js")
        assert resolve_sync("./lib", {"basedir": root}, defaults) == os.path.join(root, "lib.js")

    def test_relative_never_searches_node_modules(self, tree, defaults):
        root = tree({"node_modules/lib/x.js": ""})
        probed = []

        def is_file(path):
            probed.append(path)
            return default_is_file(path)

        with pytest.raises(ModuleNotFound):
            resolve_sync("./lib/x", {"basedir": root, "is_file": is_file}, defaults)
        assert probed
        assert not any(p.startswith(os.path.join(root, "node_modules")) for p in probed)


class TestCoreModules:
    """Built-in module short-circuit."""

    def test_core_module_returned_without_filesystem_access(self, root, defaults):
        def boom(*_args):
            raise AssertionError("filesystem touched")

        options = {"basedir": str(root), "is_file": boom, "is_directory": boom, "realpath": boom}
        assert resolve_sync("fs", options, defaults) == "fs"
        assert resolve_sync("node:path", options, defaults) == "node:path"

    def test_core_modules_can_be_disabled(self, tree, defaults):
        root = tree({"node_modules/fs/index.js": ""})
        options = {"basedir": root, "include_core_modules": False}
        assert resolve_sync("fs", options, defaults) == os.path.join(root, "node_modules", "fs", "index.js")


class TestPackageMain:
    """Legacy ``main`` handling."""

    def test_main_field(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "./lib/x.js"}, "pkg/lib/x.js": ""})
        assert resolve_sync("./pkg", {"basedir": root}, defaults) == os.path.join(root, "pkg", "lib", "x.js")

    def test_main_directory(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "lib"}, "pkg/lib/index.js": ""})
        assert resolve_sync("./pkg", {"basedir": root}, defaults) == os.path.join(root, "pkg", "lib", "index.js")

    def test_main_dot_means_index(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "."}, "pkg/index.js": ""})
        assert resolve_sync("./pkg", {"basedir": root}, defaults) == os.path.join(root, "pkg", "index.js")

    def test_missing_main_falls_back_to_index(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "gone.js"}, "pkg/index.js": ""})
        assert resolve_sync("./pkg", {"basedir": root}, defaults) == os.path.join(root, "pkg", "index.js")

    def test_incorrect_main(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "nope"}})
        with pytest.raises(IncorrectPackageMainError) as excinfo:
            resolve_sync("./pkg", {"basedir": root}, defaults)
        assert excinfo.value.code == "INCORRECT_PACKAGE_MAIN"
        assert os.path.join(root, "pkg", "nope") in str(excinfo.value)

    def test_non_string_main(self, tree, defaults):
        root = tree({"pkg/package.json": {"name": "weird", "main": ["a.js"]}})
        with pytest.raises(InvalidPackageMainError) as excinfo:
            resolve_sync("./pkg", {"basedir": root}, defaults)
        assert excinfo.value.code == "INVALID_PACKAGE_MAIN"
        assert "weird" in str(excinfo.value)

    def test_unparsable_manifest_uses_index(self, tree, defaults):
        root = tree({"pkg/package.json": "{ not json", "pkg/index.js": ""})
        assert resolve_sync("./pkg", {"basedir": root}, defaults) == os.path.join(root, "pkg", "index.js")

    def test_read_package_hook(self, tree, defaults):
        root = tree({"pkg/package.json": "main: custom", "pkg/custom.js": ""})

        def read_package(_read_file, _path):
            return {"main": "./custom.js"}

        options = {"basedir": root, "read_package": read_package}
        assert resolve_sync("./pkg", options, defaults) == os.path.join(root, "pkg", "custom.js")

    def test_package_filter_rewrites_manifest(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "a.js"}, "pkg/a.js": "", "pkg/b.js": ""})
        seen = []

        def package_filter(pkg, pkgfile, directory):
            seen.append((pkgfile, directory))
            return dict(pkg, main="b.js")

        options = {"basedir": root, "package_filter": package_filter}
        assert resolve_sync("./pkg", options, defaults) == os.path.join(root, "pkg", "b.js")
        assert seen[0] == (os.path.join(root, "pkg", "package.json"), os.path.join(root, "pkg"))


class TestPackageExports:
    """Exports maps under the various categories."""

    @pytest.fixture
    def exports_tree(self, tree):
        return tree({
            "node_modules/pkg/package.json": {
                "name": "pkg",
                "exports": {".": "./a.js", "./b": "./b.js"},
            },
            "node_modules/pkg/a.js": "",
            "node_modules/pkg/b.js": "",
            "node_modules/pkg/c.js": "",
        })

    def test_root_and_declared_subpath(self, exports_tree, defaults):
        options = {"basedir": exports_tree, "resolution": CONDITIONS}
        pkg_dir = os.path.join(exports_tree, "node_modules", "pkg")
        assert resolve_sync("pkg", options, defaults) == os.path.join(pkg_dir, "a.js")
        assert resolve_sync("pkg/b", options, defaults) == os.path.join(pkg_dir, "b.js")

    def test_undeclared_subpath_is_not_exported(self, exports_tree, defaults):
        options = {"basedir": exports_tree, "resolution": CONDITIONS}
        with pytest.raises(PackagePathNotExportedError) as excinfo:
            resolve_sync("pkg/c", options, defaults)
        assert excinfo.value.code == "ERR_PACKAGE_PATH_NOT_EXPORTED"
        assert excinfo.value.subpath == "./c"
        assert excinfo.value.manifest_path.endswith(os.path.join("pkg", "package.json"))

    def test_pre_exports_ignores_exports(self, exports_tree, defaults):
        pkg_dir = os.path.join(exports_tree, "node_modules", "pkg")
        assert resolve_sync("pkg/c", {"basedir": exports_tree}, defaults) == os.path.join(pkg_dir, "c.js")

    def test_pre_exports_ignores_malformed_exports(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {
                "exports": {".": "./a.js", "require": "./r.js"},
                "main": "./m.js",
            },
            "node_modules/pkg/m.js": "",
        })
        expected = os.path.join(root, "node_modules", "pkg", "m.js")
        assert resolve_sync("pkg", {"basedir": root}, defaults) == expected
        options = {"basedir": root, "resolution": {"category": "pre-exports"}}
        assert resolve_sync("pkg", options, defaults) == expected

    def test_malformed_exports_fail_when_honored(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {".": "./a.js", "require": "./r.js"}},
            "node_modules/pkg/a.js": "",
        })
        with pytest.raises(PackagePathNotExportedError) as excinfo:
            resolve_sync("pkg", {"basedir": root, "resolution": CONDITIONS}, defaults)
        assert excinfo.value.problems

    def test_no_fallback_to_main_once_exports_honored(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {".": "./missing.js"}, "main": "./m.js"},
            "node_modules/pkg/m.js": "",
        })
        with pytest.raises(PackagePathNotExportedError):
            resolve_sync("pkg", {"basedir": root, "resolution": CONDITIONS}, defaults)

    def test_root_only_exports_fail_closed_for_subpaths(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": "./a.js"},
            "node_modules/pkg/a.js": "",
            "node_modules/pkg/b.js": "",
        })
        options = {"basedir": root, "resolution": CONDITIONS}
        assert resolve_sync("pkg", options, defaults) == os.path.join(root, "node_modules", "pkg", "a.js")
        with pytest.raises(ModuleNotFound):
            resolve_sync("pkg/b", options, defaults)

    def test_conditions_follow_active_list(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {"default": "./d.js", "require": "./r.js"}},
            "node_modules/pkg/d.js": "",
            "node_modules/pkg/r.js": "",
        })
        pkg_dir = os.path.join(root, "node_modules", "pkg")
        assert resolve_sync("pkg", {"basedir": root, "resolution": CONDITIONS}, defaults) == os.path.join(pkg_dir, "r.js")

        custom = {"category": "conditions", "conditions": ["default"]}
        assert resolve_sync("pkg", {"basedir": root, "resolution": custom}, defaults) == os.path.join(pkg_dir, "d.js")

    def test_experimental_only_honors_default(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {"require": "./r.js", "default": "./d.js"}},
            "node_modules/pkg/d.js": "",
            "node_modules/pkg/r.js": "",
        })
        options = {"basedir": root, "resolution": {"category": "experimental"}}
        assert resolve_sync("pkg", options, defaults) == os.path.join(root, "node_modules", "pkg", "d.js")

    def test_broken_honors_string_and_ignores_objects(self, tree, defaults):
        root = tree({
            "node_modules/str/package.json": {"exports": "./a.js", "main": "./m.js"},
            "node_modules/str/a.js": "",
            "node_modules/str/m.js": "",
            "node_modules/obj/package.json": {"exports": {".": "./a.js"}, "main": "./m.js"},
            "node_modules/obj/a.js": "",
            "node_modules/obj/m.js": "",
        })
        options = {"basedir": root, "resolution": {"category": "broken"}}
        assert resolve_sync("str", options, defaults) == os.path.join(root, "node_modules", "str", "a.js")
        assert resolve_sync("obj", options, defaults) == os.path.join(root, "node_modules", "obj", "m.js")

    def test_relative_package_directory_uses_exports(self, tree, defaults):
        root = tree({"lib/package.json": {"exports": {".": "./entry.js"}}, "lib/entry.js": ""})
        options = {"basedir": root, "resolution": CONDITIONS}
        assert resolve_sync("./lib", options, defaults) == os.path.join(root, "lib", "entry.js")

    def test_scoped_package_subpath(self, tree, defaults):
        root = tree({
            "node_modules/@scope/pkg/package.json": {"exports": {"./feature": "./src/feature.js"}},
            "node_modules/@scope/pkg/src/feature.js": "",
        })
        options = {"basedir": root, "resolution": CONDITIONS}
        expected = os.path.join(root, "node_modules", "@scope", "pkg", "src", "feature.js")
        assert resolve_sync("@scope/pkg/feature", options, defaults) == expected


class TestCategorySets:
    """Resolution across several categories."""

    def test_engines_first_success_wins(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {"./sub": "./sub.js"}, "main": "./main.js"},
            "node_modules/pkg/main.js": "",
            "node_modules/pkg/sub.js": "",
        })
        options = {"basedir": root, "resolution": {"engines": True}}
        assert resolve_sync("pkg", options, defaults) == os.path.join(root, "node_modules", "pkg", "main.js")
        with pytest.raises(PackagePathNotExportedError):
            resolve_sync("pkg", {"basedir": root, "resolution": CONDITIONS}, defaults)

    def test_engines_raises_first_hard_error(self, tree, defaults):
        root = tree({"node_modules/pkg/package.json": {"exports": {"./sub": "./sub.js"}}})
        options = {"basedir": root, "resolution": {"engines": True}}
        with pytest.raises(PackagePathNotExportedError):
            resolve_sync("pkg", options, defaults)

    def test_range_resolution(self, tree, defaults):
        root = tree({
            "node_modules/pkg/package.json": {"exports": {".": "./a.js"}, "main": "./m.js"},
            "node_modules/pkg/a.js": "",
            "node_modules/pkg/m.js": "",
        })
        pkg_dir = os.path.join(root, "node_modules", "pkg")
        assert resolve_sync("pkg", {"basedir": root, "resolution": "<12.7"}, defaults) == os.path.join(pkg_dir, "m.js")
        assert resolve_sync("pkg", {"basedir": root, "resolution": ">=17"}, defaults) == os.path.join(pkg_dir, "a.js")
        assert resolve_sync("pkg", {"basedir": root, "resolution": True}, defaults) == os.path.join(pkg_dir, "a.js")


class TestBareSpecifiers:
    """node_modules search."""

    def test_nearer_ancestor_wins(self, tree, defaults):
        root = tree({
            "node_modules/dep/index.js": "",
            "sub/node_modules/dep/index.js": "",
            "sub/inner/.keep": "",
        })
        basedir = os.path.join(root, "sub", "inner")
        expected = os.path.join(root, "sub", "node_modules", "dep", "index.js")
        assert resolve_sync("dep", {"basedir": basedir}, defaults) == expected

    def test_package_file_form(self, tree, defaults):
        root = tree({"node_modules/dep.js": ""})
        assert resolve_sync("dep", {"basedir": root}, defaults) == os.path.join(root, "node_modules", "dep.js")

    def test_subpath_without_exports(self, tree, defaults):
        root = tree({"node_modules/dep/package.json": {"main": "main.js"}, "node_modules/dep/lib/util.js": ""})
        expected = os.path.join(root, "node_modules", "dep", "lib", "util.js")
        assert resolve_sync("dep/lib/util", {"basedir": root}, defaults) == expected

    def test_idempotent(self, tree, defaults):
        root = tree({"node_modules/dep/package.json": {"main": "main.js"}, "node_modules/dep/main.js": ""})
        first = resolve_sync("dep", {"basedir": root}, defaults)
        assert resolve_sync("dep", {"basedir": root}, defaults) == first


class TestFailures:
    """MODULE_NOT_FOUND and INVALID_BASEDIR."""

    def test_module_not_found_names_specifier_and_parent(self, root, defaults):
        options = {"basedir": str(root), "filename": "/app/main.js"}
        with pytest.raises(ModuleNotFound) as excinfo:
            resolve_sync("missing", options, defaults)
        assert excinfo.value.code == "MODULE_NOT_FOUND"
        assert str(excinfo.value) == "Cannot find module 'missing' from '/app/main.js'"

    def test_parent_defaults_to_basedir(self, root, defaults):
        with pytest.raises(ModuleNotFound) as excinfo:
            resolve_sync("./missing", {"basedir": str(root)}, defaults)
        assert excinfo.value.parent == str(root)

    def test_basedir_must_be_directory(self, tree, defaults):
        root = tree({"file.js": ""})
        with pytest.raises(InvalidBasedirError) as excinfo:
            resolve_sync("./x", {"basedir": os.path.join(root, "file.js")}, defaults)
        assert excinfo.value.code == "INVALID_BASEDIR"
        assert isinstance(excinfo.value, TypeError)


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="symlinks required")
class TestSymlinks:
    """preserve_symlinks gate."""

    def test_result_is_realpath_by_default(self, tree, defaults):
        root = tree({"real/index.js": ""})
        os.symlink(os.path.join(root, "real"), os.path.join(root, "link"))
        assert resolve_sync("./link", {"basedir": root}, defaults) == os.path.join(root, "real", "index.js")

    def test_preserve_symlinks(self, tree, defaults):
        root = tree({"real/index.js": ""})
        os.symlink(os.path.join(root, "real"), os.path.join(root, "link"))
        options = {"basedir": root, "preserve_symlinks": True}
        assert resolve_sync("./link", options, defaults) == os.path.join(root, "link", "index.js")


class TestPathFilter:
    """path_filter hook."""

    def test_path_filter_rewrites_candidate(self, tree, defaults):
        root = tree({"package.json": {"name": "app"}, "alt.js": ""})
        calls = []

        def path_filter(pkg, path, relative):
            calls.append((pkg["name"], relative))
            return "alt" if relative == "orig" else None

        options = {"basedir": root, "path_filter": path_filter}
        assert resolve_sync("./orig", options, defaults) == os.path.join(root, "alt.js")
        assert calls[0] == ("app", "orig")


class TestEdgeCases:
    """Cycles, empty option lists, special files."""

    def test_main_cycle_is_incorrect_main(self, tree, defaults):
        root = tree({"pkg/package.json": {"main": "./sub"}, "pkg/sub/package.json": {"main": ".."}})
        with pytest.raises(IncorrectPackageMainError) as excinfo:
            resolve_sync("./pkg", {"basedir": root}, defaults)
        assert excinfo.value.code == "INCORRECT_PACKAGE_MAIN"

    def test_main_cycle_through_node_modules(self, tree, defaults):
        root = tree({
            "node_modules/dep/package.json": {"main": "lib"},
            "node_modules/dep/lib/package.json": {"main": "../"},
        })
        with pytest.raises(IncorrectPackageMainError):
            resolve_sync("dep", {"basedir": root}, defaults)

    def test_empty_extensions_probe_exact_name_only(self, tree, defaults):
        root = tree({"a.js": "", "b": ""})
        options = {"basedir": root, "extensions": []}
        with pytest.raises(ModuleNotFound):
            resolve_sync("./a", options, defaults)
        assert resolve_sync("./b", options, defaults) == os.path.join(root, "b")

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes required")
    def test_fifo_counts_as_file(self, tree, defaults):
        root = tree({})
        os.mkfifo(os.path.join(root, "pipe.js"))
        assert resolve_sync("./pipe", {"basedir": root}, defaults) == os.path.join(root, "pipe.js")

    def test_core_module_ignores_missing_basedir(self, root, defaults):
        missing = str(root / "does-not-exist")
        assert resolve_sync("fs", {"basedir": missing}, defaults) == "fs"
        with pytest.raises(InvalidBasedirError):
            resolve_sync("./x", {"basedir": missing}, defaults)

"""Tests for heuristic structure extraction."""

from __future__ import annotations

import textwrap
from pathlib import Path

from localctx.extraction import extract_structure, extract_structure_from_text
from tests._fixtures.repo_builder import RepoBuilder

DART_SOURCE = textwrap.dedent(
    """
    import 'package:app/base.dart';

    /// A user profile.
    class UserProfile extends Base {
      final String name;

      /// Creates a profile.
      UserProfile(this.name);

      UserProfile.guest() : name = 'guest';

      /// Display label.
      String get label => name.toUpperCase();

      set nickname(String value) {
        _nick = value;
      }

      Future<void> save({
        bool force = false,
      }) async {
        if (force) {
          await _write();
        }
      }
    }

    void main() {
      runApp(UserProfile('x'));
    }
    """
).lstrip("\n")

TS_SOURCE = textwrap.dedent(
    """
    import { helper } from './helper';

    /**
     * Service for orders.
     */
    export class OrderService {
      constructor(private readonly repo: Repo) {}

      async findAll(limit: number): Promise<Order[]> {
        return this.repo.list(limit);
      }

      get count(): number {
        return 0;
      }
    }

    export function formatOrder(order: Order): string {
      return `${order.id}`;
    }

    export const total = (orders: Order[]): number => {
      return orders.length;
    };
    """
).lstrip("\n")

PY_SOURCE = textwrap.dedent(
    '''
    import os


    # Loads settings.
    class Settings(Base):
        """Docstring."""

        def __init__(self, path):
            self.path = path

        @property
        def name(self):
            return os.path.basename(self.path)

        def load(
            self,
            strict=False,
        ):
            if strict:
                return None


    def helper(value):  # trailing note
        return value * 2


    async def fetch(url):
        pass
    '''
).lstrip("\n")


def test_dart_class_members_and_functions() -> None:
    structure = extract_structure_from_text("profile.dart", DART_SOURCE)

    assert [cls.name for cls in structure.classes] == ["UserProfile"]
    profile = structure.classes[0]
    assert profile.signature == "class UserProfile extends Base"
    assert profile.documentation == "A user profile."
    assert [method.name for method in profile.methods] == [
        "UserProfile",
        "UserProfile.guest",
        "get label",
        "set nickname",
        "save",
    ]
    methods = {method.name: method for method in profile.methods}
    assert methods["UserProfile"].documentation == "Creates a profile."
    assert methods["get label"].documentation == "Display label."
    assert methods["UserProfile.guest"].documentation is None
    assert methods["save"].signature == "Future<void> save({ bool force = false, }) async"

    assert [func.name for func in structure.functions] == ["main"]
    assert structure.functions[0].signature == "void main()"


def test_typescript_class_and_top_level_functions() -> None:
    structure = extract_structure_from_text("orders.ts", TS_SOURCE)

    service = structure.classes[0]
    assert service.name == "OrderService"
    assert service.documentation == "Service for orders."
    assert [method.name for method in service.methods] == ["constructor", "findAll", "get count"]
    assert service.methods[1].signature == "async findAll(limit: number): Promise<Order[]>"

    assert [func.name for func in structure.functions] == ["formatOrder", "total"]
    assert structure.functions[1].signature == (
        "export const total = (orders: Order[]): number =>"
    )


def test_python_indented_bodies() -> None:
    structure = extract_structure_from_text("settings.py", PY_SOURCE)

    settings = structure.classes[0]
    assert settings.name == "Settings"
    assert settings.signature == "class Settings(Base):"
    assert settings.documentation == "Loads settings."
    assert [method.name for method in settings.methods] == ["__init__", "name", "load"]
    assert settings.methods[2].signature == "def load( self, strict=False, ):"

    assert [func.name for func in structure.functions] == ["helper", "fetch"]
    assert structure.functions[0].signature == "def helper(value):"
    assert structure.functions[1].signature == "async def fetch(url):"


def test_single_line_class_body(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"a.txt": "nothing here\n", "b.ts": "class Foo { bar() {} }\n"})

    structure = extract_structure(repo_builder.file("b.ts"))

    assert len(structure.classes) == 1
    foo = structure.classes[0]
    assert foo.name == "Foo"
    assert [method.name for method in foo.methods] == ["bar"]
    assert foo.methods[0].signature == "bar()"
    assert structure.functions == ()


def test_multi_line_class_signature_with_nested_delimiters() -> None:
    text = textwrap.dedent(
        """
        class Point(
            val x: Int = listOf(1, 2).first(),
            val y: Map<String, Int> = mapOf(),
        ) : Shape {
            fun area(): Int {
                return 0
            }
        }
        """
    ).lstrip("\n")

    structure = extract_structure_from_text("point.kt", text)

    point = structure.classes[0]
    assert point.signature == (
        "class Point( val x: Int = listOf(1, 2).first(), "
        "val y: Map<String, Int> = mapOf(), ) : Shape"
    )
    assert [method.name for method in point.methods] == ["area"]


def test_control_flow_is_not_a_function() -> None:
    text = "if (ready) {\n  go();\n}\nwhile (x) {\n}\nfor (;;) {}\nrun();\n"

    structure = extract_structure_from_text("script.js", text)

    assert structure.functions == ()
    assert structure.classes == ()


def test_extraction_is_idempotent() -> None:
    first = extract_structure_from_text("profile.dart", DART_SOURCE)
    second = extract_structure_from_text("profile.dart", DART_SOURCE)

    assert first == second


def test_malformed_input_terminates_with_partial_output() -> None:
    text = "class Broken {\n  void foo(\n    int a,\n"

    structure = extract_structure_from_text("broken.dart", text)

    assert [cls.name for cls in structure.classes] == ["Broken"]
    assert structure.classes[0].methods[0].name == "foo"

    garbage = extract_structure_from_text("noise.txt", "}}}{{{((('\"`\n)))]]]\n")
    assert garbage.is_empty


def test_unreadable_files_yield_empty_structure(tmp_path: Path) -> None:
    binary = tmp_path / "blob.dart"
    binary.write_bytes(b"\xff\xfe\x00class X {}")

    assert extract_structure(binary).is_empty
    assert extract_structure(tmp_path / "missing.dart").is_empty
    assert extract_structure(tmp_path / "missing.dart").file_path == str(tmp_path / "missing.dart")


def test_apostrophes_in_block_comments_do_not_open_strings() -> None:
    text = textwrap.dedent(
        """
        class Foo {
          /** Don't call this directly. */
          bar() {}

          /**
           * Returns the user's name.
           */
          baz() {}
        }

        function helper() {
          return 1;
        }
        """
    ).lstrip("\n")

    structure = extract_structure_from_text("foo.ts", text)

    assert [cls.name for cls in structure.classes] == ["Foo"]
    foo = structure.classes[0]
    assert [method.name for method in foo.methods] == ["bar", "baz"]
    assert foo.methods[0].documentation == "Don't call this directly."
    assert foo.methods[1].documentation == "Returns the user's name."
    assert [func.name for func in structure.functions] == ["helper"]


def test_single_line_body_with_several_members() -> None:
    structure = extract_structure_from_text("b.ts", "class Foo { bar() {} get size() { return 1; } baz(x) {} }\n")

    foo = structure.classes[0]
    assert [method.name for method in foo.methods] == ["bar", "get size", "baz"]
    assert [method.signature for method in foo.methods] == ["bar()", "get size()", "baz(x)"]

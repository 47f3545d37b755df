import unittest

from minerva_requests.class_expression import (
    ClassRef,
    ClassSet,
    DefaultClassExpressionAdapter,
    SomeValuesFrom,
    expression_from_dict,
)
from minerva_requests.errors import InvalidArgumentError, InvalidOperationError


class TestClassExpressions(unittest.TestCase):
    def setUp(self) -> None:
        self.adapter = DefaultClassExpressionAdapter()

    def test_construct_from_id(self) -> None:
        expr = self.adapter.construct("GO:0008150")
        self.assertEqual(expr.to_dict(), {"type": "class", "id": "GO:0008150"})

    def test_construct_passes_ir_through(self) -> None:
        ref = ClassRef("GO:0005634")
        self.assertIs(self.adapter.construct(ref), ref)

    def test_svf_structure(self) -> None:
        expr = self.adapter.as_svf("GO:0005634", "BFO:0000050")
        self.assertEqual(
            expr.to_dict(),
            {
                "type": "svf",
                "property": {"type": "property", "id": "BFO:0000050"},
                "filler": {"type": "class", "id": "GO:0005634"},
            },
        )

    def test_set_structure(self) -> None:
        expr = self.adapter.as_set("union", ["GO:1", ClassRef("GO:2")])
        self.assertEqual(
            expr.to_dict(),
            {
                "type": "union",
                "expressions": [
                    {"type": "class", "id": "GO:1"},
                    {"type": "class", "id": "GO:2"},
                ],
            },
        )

    def test_dict_roundtrip(self) -> None:
        nested = ClassSet(
            "intersection",
            (ClassRef("GO:1"), SomeValuesFrom("RO:0002333", ClassRef("UniProtKB:P1"))),
        )
        loaded = expression_from_dict(nested.to_dict())
        self.assertEqual(loaded, nested)
        self.assertEqual(self.adapter.construct(nested.to_dict()), nested)

    def test_unknown_set_kind(self) -> None:
        with self.assertRaises(InvalidOperationError):
            self.adapter.as_set("complement", ["GO:1"])

    def test_bad_inputs(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.adapter.construct(42)
        with self.assertRaises(InvalidArgumentError):
            expression_from_dict({"type": "bogus"})
        with self.assertRaises(InvalidArgumentError):
            self.adapter.as_set("union", "GO:1")


if __name__ == "__main__":
    unittest.main()

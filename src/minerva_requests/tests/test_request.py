import unittest

from minerva_requests.errors import InvalidArgumentError
from minerva_requests.request import FactTriple, Request
from minerva_requests.variable import sequential_ids


class TestRequest(unittest.TestCase):
    def _request(self, entity: str = "individual", operation: str = "add") -> Request:
        return Request(entity, operation, id_factory=sequential_ids("ind"))

    def test_entity_and_operation(self) -> None:
        req = self._request("edge", "remove")
        self.assertEqual(req.entity, "edge")
        self.assertEqual(req.operation, "remove")

    def test_unknown_entity_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            Request("graph", "add")

    def test_implicit_individual_assigns_variable(self) -> None:
        req = self._request()
        req.add_class_expression("GO:0008150")
        data = req.to_dict()
        self.assertEqual(data["entity"], "individual")
        self.assertEqual(data["operation"], "add")
        self.assertEqual(data["arguments"]["assign-to-variable"], "ind-1")
        self.assertEqual(req.individual, "ind-1")
        self.assertNotIn("individual", data["arguments"])

    def test_explicit_individual_skips_assignment(self) -> None:
        req = self._request("individual", "remove")
        req.individual = "gomodel:1/i1"
        data = req.to_dict()
        self.assertEqual(data["arguments"]["individual"], "gomodel:1/i1")
        self.assertNotIn("assign-to-variable", data["arguments"])
        self.assertTrue(req.individual_is_explicit)

    def test_non_individual_never_assigns(self) -> None:
        data = self._request("model", "get").to_dict()
        self.assertEqual(data["arguments"], {})

    def test_fact_accessors(self) -> None:
        req = self._request("edge", "add")
        req.set_fact("i1", "i2", "BFO:0000050")
        self.assertEqual(req.subject, "i1")
        self.assertEqual(req.object, "i2")
        self.assertEqual(req.predicate, "BFO:0000050")
        self.assertEqual(req.fact_triple(), ["i1", "i2", "BFO:0000050"])

    def test_model_and_special(self) -> None:
        req = self._request("model", "add")
        self.assertIsNone(req.model)
        req.model = "gomodel:1"
        self.assertEqual(req.model, "gomodel:1")
        self.assertEqual(req.special("taxon-id", "NCBITaxon:9606"), "NCBITaxon:9606")
        self.assertEqual(req.special("taxon-id"), "NCBITaxon:9606")
        self.assertIsNone(req.special("class-id"))
        args = req.to_dict()["arguments"]
        self.assertEqual(args["model-id"], "gomodel:1")
        self.assertEqual(args["taxon-id"], "NCBITaxon:9606")

    def test_annotations_accumulate(self) -> None:
        req = self._request("model", "add-annotation")
        self.assertIsNone(req.annotations())
        self.assertEqual(req.add_annotation("title", "My model"), 1)
        self.assertEqual(req.add_annotation("source", ["PMID:1", "PMID:2"]), 3)
        self.assertEqual(
            req.annotations(),
            [
                {"key": "title", "value": "My model"},
                {"key": "source", "value": "PMID:1"},
                {"key": "source", "value": "PMID:2"},
            ],
        )

    def test_annotation_rejects_non_list(self) -> None:
        req = self._request("model", "add-annotation")
        with self.assertRaises(InvalidArgumentError):
            req.add_annotation("count", 3)
        self.assertIsNone(req.annotations())

    def test_expressions_accumulate(self) -> None:
        req = self._request()
        self.assertEqual(req.add_class_expression("GO:1"), 1)
        self.assertEqual(req.add_svf_expression("GO:2", "BFO:0000050"), 2)
        self.assertEqual(req.add_set_class_expression("intersection", ["GO:3", "GO:4"]), 3)
        kinds = [expr["type"] for expr in req.expressions()]
        self.assertEqual(kinds, ["class", "svf", "intersection"])

    def test_default_model_fills_output_only(self) -> None:
        req = self._request()
        data = req.to_dict(default_model_id="gomodel:7")
        self.assertEqual(data["arguments"]["model-id"], "gomodel:7")
        self.assertIsNone(req.model)

        req.model = "gomodel:1"
        data = req.to_dict(default_model_id="gomodel:7")
        self.assertEqual(data["arguments"]["model-id"], "gomodel:1")

    def test_to_dict_does_not_share_arguments(self) -> None:
        req = self._request()
        data = req.to_dict()
        data["arguments"]["extra"] = True
        self.assertNotIn("extra", req.to_dict()["arguments"])


class TestFactTriple(unittest.TestCase):
    def test_coerce_list(self) -> None:
        fact = FactTriple.coerce(["i1", "i2", "RO:0002333"])
        self.assertEqual(fact.as_list(), ["i1", "i2", "RO:0002333"])
        self.assertIs(FactTriple.coerce(fact), fact)

    def test_missing_fields_rejected(self) -> None:
        for bad in (["i1", None, "part_of"], ["i1", "i2"], ["", "i2", "p"], "i1", None):
            with self.subTest(bad=bad):
                with self.assertRaisesRegex(InvalidArgumentError, "malformed fact"):
                    FactTriple.coerce(bad)


if __name__ == "__main__":
    unittest.main()

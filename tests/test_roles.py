import unittest

import support  # noqa: F401

from core.domain.models import Operation
from core.services.roles import classify


def op(method, path, key=None):
    return Operation(key=key or f"{method.lower()}-{path}", method=method, path=path)


class TestClassify(unittest.TestCase):
    def test_full_crud_set(self) -> None:
        ops = [
            op("GET", "/widgets"),
            op("GET", "/widgets/{id}"),
            op("POST", "/widgets"),
            op("PUT", "/widgets/{id}"),
            op("DELETE", "/widgets/{id}"),
        ]
        roles = classify(ops)
        self.assertIs(roles.list_op, ops[0])
        self.assertIs(roles.detail_op, ops[1])
        self.assertIs(roles.create_op, ops[2])
        self.assertIs(roles.update_op, ops[3])
        self.assertIs(roles.delete_op, ops[4])
        self.assertEqual(roles.primary_param, "id")

    def test_only_list(self) -> None:
        roles = classify([op("GET", "/widgets")])
        self.assertIsNotNone(roles.list_op)
        self.assertIsNone(roles.detail_op)
        self.assertIsNone(roles.create_op)
        self.assertIsNone(roles.update_op)
        self.assertIsNone(roles.delete_op)
        self.assertEqual(roles.primary_param, "id")

    def test_empty_operations(self) -> None:
        roles = classify([])
        self.assertIsNone(roles.list_op)
        self.assertEqual(roles.primary_param, "id")

    def test_first_match_wins_in_declaration_order(self) -> None:
        first = op("GET", "/widgets/archived", key="archived")
        second = op("GET", "/widgets", key="all")
        roles = classify([first, second])
        self.assertIs(roles.list_op, first)

        roles = classify([second, first])
        self.assertIs(roles.list_op, second)

    def test_patch_counts_as_update(self) -> None:
        patch = op("PATCH", "/accounts/{accountId}")
        roles = classify([op("GET", "/accounts"), patch])
        self.assertIs(roles.update_op, patch)
        self.assertEqual(roles.primary_param, "accountId")

    def test_primary_param_falls_back_through_detail_update_delete(self) -> None:
        roles = classify([op("DELETE", "/keys/{keyId}"), op("PUT", "/keys/{code}")])
        self.assertEqual(roles.primary_param, "code")

        roles = classify([op("DELETE", "/keys/{keyId}")])
        self.assertEqual(roles.primary_param, "keyId")

        roles = classify([op("DELETE", "/keys/{keyId}"), op("GET", "/keys/{slug}")])
        self.assertEqual(roles.primary_param, "slug")

    def test_methods_with_wrong_arity_are_ignored(self) -> None:
        ops = [
            op("POST", "/widgets/{id}/activate"),
            op("PUT", "/widgets"),
            op("DELETE", "/widgets"),
        ]
        roles = classify(ops)
        self.assertIsNone(roles.create_op)
        self.assertIsNone(roles.update_op)
        self.assertIsNone(roles.delete_op)

    def test_nested_resource_uses_first_path_param(self) -> None:
        detail = op("GET", "/accounts/{accountId}/fees/{feeId}")
        roles = classify([detail])
        self.assertIs(roles.detail_op, detail)
        self.assertEqual(roles.primary_param, "accountId")


if __name__ == "__main__":
    unittest.main()

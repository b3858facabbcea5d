import unittest
from datetime import datetime, timezone

from sitetrack.core.query_config import QueryPolicy
from sitetrack.db.collections import DocumentCollection
from sitetrack.schemas.query import SortClause
from sitetrack.services.query_builder import QueryBuilder

MATERIALS_POLICY = QueryPolicy(
    entity="materials",
    allowed_fields=frozenset({"name", "category", "quantity", "ecoFriendly", "createdAt"}),
    allowed_operators=frozenset({"eq", "gt", "gte", "lt", "lte", "contains", "in"}),
    default_sort=(SortClause(field="createdAt", dir="desc"),),
    default_page_size=50,
    max_page_size=100,
)


class _RecordingCursor:
    def __init__(self, calls):
        self.calls = calls

    def sort(self, spec):
        self.calls.append(("sort", spec))
        return self

    def select(self, fields):
        self.calls.append(("select", fields))
        return self

    def skip(self, n):
        self.calls.append(("skip", n))
        return self

    def limit(self, n):
        self.calls.append(("limit", n))
        return self


class _RecordingCollection:
    def __init__(self, count=0, error=None):
        self.calls = []
        self.count = count
        self.error = error

    def find(self, predicates):
        if self.error is not None:
            raise self.error
        self.calls.append(("find", predicates))
        return _RecordingCursor(self.calls)

    def count_documents(self, predicates):
        if self.error is not None:
            raise self.error
        self.calls.append(("count", predicates))
        return self.count


def _build(query, policy=MATERIALS_POLICY, collection=None):
    return QueryBuilder(collection or _RecordingCollection(), query, policy).filter().sort().limit_fields().paginate()


class QueryBuilderSpecTests(unittest.TestCase):
    def test_full_materials_request(self):
        qb = _build(
            {
                "category[in]": "cement,steel",
                "quantity[gte]": "50",
                "ecoFriendly": "true",
                "sort": "quantity:desc",
                "page": "2",
                "limit": "20",
                "select": "name,quantity,category",
            }
        )
        spec = qb.spec
        self.assertEqual(
            [(p.field, p.op, p.value) for p in spec.predicates],
            [("category", "in", ["cement", "steel"]), ("quantity", "gte", 50), ("ecoFriendly", "eq", True)],
        )
        self.assertEqual(spec.sort, (SortClause(field="quantity", dir="desc"),))
        self.assertEqual(spec.fields, ("name", "quantity", "category"))
        self.assertEqual((spec.page, spec.limit, spec.skip), (2, 20, 20))

    def test_forbidden_field_and_operator_add_nothing(self):
        qb = _build({"unauthorizedField": "x", "quantity[badop]": "5"})
        self.assertEqual(qb.spec.predicates, ())
        self.assertEqual(
            [(r.key, r.reason) for r in qb.rejected],
            [("unauthorizedField", "field not allowed"), ("quantity[badop]", "operator not allowed")],
        )

    def test_whitelist_blocks_unlisted_field(self):
        policy = QueryPolicy(
            entity="materials",
            allowed_fields=frozenset({"name", "category"}),
            allowed_operators=frozenset({"eq", "contains"}),
            default_sort=(),
        )
        qb = _build({"price[gt]": "100"}, policy=policy)
        self.assertEqual(qb.spec.predicates, ())

    def test_same_query_builds_same_state(self):
        query = {"category[in]": "cement,steel", "createdAt[gte]": "2024-01-01", "sort": "name", "page": "3"}
        self.assertEqual(_build(query).spec, _build(query).spec)

    def test_repeated_key_adds_one_predicate_per_value(self):
        qb = _build({"quantity[gte]": ["10", "20"]})
        self.assertEqual([p.value for p in qb.spec.predicates], [10, 20])

    def test_filter_twice_appends(self):
        qb = QueryBuilder(_RecordingCollection(), {"category": "cement"}, MATERIALS_POLICY).filter().filter()
        self.assertEqual(len(qb.spec.predicates), 2)
        self.assertEqual(qb.get_query(), qb.spec.predicates)

    def test_reserved_keys_are_not_filters(self):
        qb = _build({"page": "1", "limit": "5", "sort": "name", "select": "name", "fields": "name"})
        self.assertEqual(qb.spec.predicates, ())


class QueryBuilderSortTests(unittest.TestCase):
    def test_missing_sort_uses_policy_default(self):
        self.assertEqual(_build({}).spec.sort, (SortClause(field="createdAt", dir="desc"),))

    def test_empty_sort_uses_policy_default(self):
        self.assertEqual(_build({"sort": ""}).spec.sort, (SortClause(field="createdAt", dir="desc"),))

    def test_multi_field_sort_and_direction_defaults(self):
        qb = _build({"sort": "category:asc, quantity:desc,name,createdAt:sideways"})
        self.assertEqual(
            [(c.field, c.dir) for c in qb.spec.sort],
            [("category", "asc"), ("quantity", "desc"), ("name", "asc"), ("createdAt", "asc")],
        )

    def test_invalid_sort_fields_are_dropped(self):
        qb = _build({"sort": "secret:desc,quantity:desc"})
        self.assertEqual(qb.spec.sort, (SortClause(field="quantity", dir="desc"),))
        self.assertEqual([r.key for r in qb.rejected], ["sort=secret:desc"])

    def test_all_invalid_sort_fields_leave_no_sort(self):
        self.assertEqual(_build({"sort": "secret"}).spec.sort, ())


class QueryBuilderProjectionTests(unittest.TestCase):
    def test_fields_is_an_alias_for_select(self):
        self.assertEqual(_build({"fields": "name,quantity"}).spec.fields, ("name", "quantity"))

    def test_projection_intersects_with_whitelist(self):
        self.assertEqual(_build({"select": "name,password,name"}).spec.fields, ("name",))

    def test_empty_intersection_means_all_fields(self):
        self.assertIsNone(_build({"select": "password,secret"}).spec.fields)
        self.assertIsNone(_build({"select": ""}).spec.fields)
        self.assertIsNone(_build({}).spec.fields)


class QueryBuilderPaginationTests(unittest.TestCase):
    def test_defaults(self):
        spec = _build({}).spec
        self.assertEqual((spec.page, spec.limit, spec.skip), (1, 50, 0))

    def test_limit_is_clamped_to_max(self):
        self.assertEqual(_build({"limit": "500"}).spec.limit, 100)

    def test_page_zero_or_negative_is_one(self):
        self.assertEqual(_build({"page": "0"}).spec.page, 1)
        self.assertEqual(_build({"page": "-4"}).spec.page, 1)
        self.assertEqual(_build({"page": "-4"}).spec.skip, 0)

    def test_huge_page_keeps_skip_within_64_bits(self):
        spec = _build({"page": "99999999999999999999", "limit": "20"}).spec
        self.assertLessEqual(spec.skip, 2**63 - 1)
        self.assertEqual(spec.skip, (spec.page - 1) * 20)
        self.assertGreater(spec.page, 1)

    def test_non_positive_or_garbage_limit_uses_default(self):
        self.assertEqual(_build({"limit": "0"}).spec.limit, 50)
        self.assertEqual(_build({"limit": "-10"}).spec.limit, 50)
        self.assertEqual(_build({"limit": "lots"}).spec.limit, 50)

    def test_leading_integer_is_used(self):
        spec = _build({"page": "3rd", "limit": "10abc"}).spec
        self.assertEqual((spec.page, spec.limit, spec.skip), (3, 10, 20))

    def test_pagination_meta(self):
        qb = _build({"page": "2", "limit": "20"})
        meta = qb.get_pagination_meta(45)
        self.assertEqual(
            meta.model_dump(by_alias=True),
            {"page": 2, "limit": 20, "total": 45, "totalPages": 3, "hasNextPage": True, "hasPrevPage": True},
        )

    def test_pagination_meta_past_last_page(self):
        meta = _build({"page": "9", "limit": "20"}).get_pagination_meta(45)
        self.assertFalse(meta.has_next_page)
        self.assertTrue(meta.has_prev_page)

    def test_pagination_meta_empty(self):
        meta = _build({}).get_pagination_meta(0)
        self.assertEqual((meta.total_pages, meta.has_next_page, meta.has_prev_page), (0, False, False))


class QueryBuilderExecutionTests(unittest.TestCase):
    def test_build_chains_find_sort_select_skip_limit(self):
        collection = _RecordingCollection()
        qb = _build({"category": "cement", "sort": "name", "select": "name", "page": "2", "limit": "5"}, collection=collection)
        qb.build()
        self.assertEqual([call[0] for call in collection.calls], ["find", "sort", "select", "skip", "limit"])
        self.assertEqual(collection.calls[3], ("skip", 5))
        self.assertEqual(collection.calls[4], ("limit", 5))

    def test_build_skips_select_when_all_fields(self):
        collection = _RecordingCollection()
        _build({}, collection=collection).build()
        self.assertNotIn("select", [call[0] for call in collection.calls])

    def test_count_uses_filter_only(self):
        collection = _RecordingCollection(count=7)
        qb = _build({"category": "cement", "page": "3"}, collection=collection)
        self.assertEqual(qb.count_documents(), 7)
        name, predicates = collection.calls[-1]
        self.assertEqual(name, "count")
        self.assertEqual(predicates, qb.spec.predicates)

    def test_storage_errors_propagate(self):
        error = ConnectionError("storage unavailable")
        qb = _build({}, collection=_RecordingCollection(error=error))
        with self.assertRaises(ConnectionError) as ctx:
            qb.build()
        self.assertIs(ctx.exception, error)
        with self.assertRaises(ConnectionError):
            qb.count_documents()


class QueryBuilderDocumentCollectionTests(unittest.TestCase):
    def setUp(self):
        self.collection = DocumentCollection(
            [
                {"id": "1", "name": "Portland a.b*c", "category": "cement", "quantity": 120, "ecoFriendly": True,
                 "createdAt": datetime(2024, 2, 1, tzinfo=timezone.utc)},
                {"id": "2", "name": "Rebar abbbc", "category": "steel", "quantity": 60, "ecoFriendly": True,
                 "createdAt": datetime(2024, 3, 1, tzinfo=timezone.utc)},
                {"id": "3", "name": "Oak planks", "category": "wood", "quantity": 80, "ecoFriendly": False,
                 "createdAt": datetime(2023, 12, 1, tzinfo=timezone.utc)},
                {"id": "4", "name": "Bricks", "category": "bricks", "quantity": 10, "ecoFriendly": True,
                 "createdAt": datetime(2024, 1, 15, tzinfo=timezone.utc)},
            ]
        )

    def test_contains_is_literal(self):
        qb = _build({"name[contains]": "a.b*c"}, collection=self.collection)
        self.assertEqual([r["id"] for r in qb.build().all()], ["1"])

    def test_filters_sort_and_projection(self):
        qb = _build(
            {"category[in]": "cement,steel,wood", "quantity[gte]": "50", "sort": "quantity:asc", "select": "name"},
            collection=self.collection,
        )
        rows = qb.build().all()
        self.assertEqual(rows, [{"id": "2", "name": "Rebar abbbc"}, {"id": "3", "name": "Oak planks"},
                                {"id": "1", "name": "Portland a.b*c"}])
        self.assertEqual(qb.count_documents(), 3)

    def test_default_sort_and_date_filter(self):
        qb = _build({"createdAt[gte]": "2024-01-01"}, collection=self.collection)
        self.assertEqual([r["id"] for r in qb.build().all()], ["2", "1", "4"])

    def test_page_past_the_end_is_empty_with_accurate_meta(self):
        qb = _build({"page": "3", "limit": "2"}, collection=self.collection)
        self.assertEqual(qb.build().all(), [])
        meta = qb.get_pagination_meta(qb.count_documents())
        self.assertEqual((meta.total, meta.total_pages, meta.has_next_page), (4, 2, False))


if __name__ == "__main__":
    unittest.main()

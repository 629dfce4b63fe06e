import suite
from collections import namedtuple
from fractions import Fraction
from sequin import S, of, empty, Option, Collector, Characteristics, DuplicateKeyError, SummaryStatistics
from sequin import collectors as C

test = suite.test
assert_that = suite.assert_that
assert_raises = suite.assert_raises

# helper data
Order = namedtuple('Order', ['id', 'customer', 'region', 'amount'])
orders = [
    Order(1, 'ana', 'north', 120),
    Order(2, 'ben', 'south', 80),
    Order(3, 'ana', 'north', 45),
    Order(4, 'cy', 'east', 300),
    Order(5, 'ben', 'south', 15),
    Order(6, 'dee', 'north', 60),
]
items = [{'name': 'pen', 'price': 5}, {'name': 'cup', 'price': 1}, {'name': 'lamp', 'price': 9}]


def split_evaluate(collector, data, cut):
    """accumulate two halves separately and combine them, as a parallel run would"""
    left = collector.fold(data[:cut])
    right = collector.fold(data[cut:])
    return collector.finish(collector.combiner(left, right))


# collection building

@test("to_list, to_tuple and to_set collect every element")
def test_collection_builders():
    assert_that(of(3, 1, 3).to.collect(C.to_list()) == [3, 1, 3], "list keeps order and duplicates")
    assert_that(of(3, 1, 3).to.collect(C.to_tuple()) == (3, 1, 3), "tuple keeps order and duplicates")
    assert_that(of(3, 1, 3).to.collect(C.to_set()) == {1, 3}, "set removes duplicates")
    assert_that(C.to_set().unordered, "to_set is flagged unordered")
    assert_that(Characteristics.IDENTITY_FINISH in C.to_list().characteristics, "to_list has an identity finisher")
    assert_that(Characteristics.IDENTITY_FINISH not in C.to_tuple().characteristics, "to_tuple converts at the end")


@test("to_map builds a dict and rejects duplicate keys")
def test_to_map():
    by_id = S(orders).to.collect(C.to_map(lambda o: o.id, lambda o: o.amount))
    assert_that(by_id == {1: 120, 2: 80, 3: 45, 4: 300, 5: 15, 6: 60}, f"mapped: {by_id}")

    with assert_raises(DuplicateKeyError, contains="'ana'") as raised:
        S(orders).to.collect(C.to_map(lambda o: o.customer, lambda o: o.amount))
    assert_that(raised.error.key == 'ana', f"error should carry the key: {raised.error.key}")
    assert_that(isinstance(raised.error, ValueError), "duplicate keys are value errors")


@test("to_map merges duplicates with a merge function")
def test_to_map_merge():
    totals = S(orders).to.collect(C.to_map(lambda o: o.customer, lambda o: o.amount, lambda a, b: a + b))
    assert_that(totals == {'ana': 165, 'ben': 95, 'cy': 300, 'dee': 60}, f"merged: {totals}")

    latest = S(orders).to.collect(C.to_map(lambda o: o.region, lambda o: o.id, lambda old, new: new))
    assert_that(latest == {'north': 6, 'south': 5, 'east': 4}, f"merge sees existing then new: {latest}")


@test("to_map allows none values")
def test_to_map_none_values():
    result = of('a', 'b').to.collect(C.to_map(lambda s: s, lambda s: None))
    assert_that(result == {'a': None, 'b': None}, f"none is a value, not a missing entry: {result}")


# grouping

@test("grouping_by builds lists per key in first-seen order")
def test_grouping_by_default():
    groups = S(orders).to.collect(C.grouping_by(lambda o: o.region))
    assert_that(list(groups.keys()) == ['north', 'south', 'east'], f"key order: {list(groups)}")
    assert_that([o.id for o in groups['north']] == [1, 3, 6], "encounter order within a group")


@test("grouping_by applies the downstream collector per group")
def test_grouping_by_downstream():
    counts = S(orders).to.collect(C.grouping_by(lambda o: o.region, C.counting()))
    assert_that(counts == {'north': 3, 'south': 2, 'east': 1}, f"counts: {counts}")

    customers = S(orders).to.collect(C.grouping_by(lambda o: o.region, C.mapping(lambda o: o.customer, C.to_set())))
    assert_that(customers == {'north': {'ana', 'dee'}, 'south': {'ben'}, 'east': {'cy'}}, f"sets: {customers}")

    totals = S(orders).to.collect(C.grouping_by(lambda o: o.customer, C.summing_int(lambda o: o.amount)))
    assert_that(totals == {'ana': 165, 'ben': 95, 'cy': 300, 'dee': 60}, f"sums: {totals}")

    ids = S(orders).to.collect(C.grouping_by(lambda o: o.region, C.mapping(lambda o: o.id, C.to_tuple())))
    assert_that(ids == {'north': (1, 3, 6), 'south': (2, 5), 'east': (4,)}, f"finisher runs per group: {ids}")


@test("grouping_by groups are disjoint and cover every element")
def test_grouping_by_exhaustive():
    for key_fn in (lambda x: x % 3, lambda x: x < 10, lambda x: 'same'):
        data = list(range(25))
        groups = S(data).to.collect(C.grouping_by(key_fn))
        flattened = [x for group in groups.values() for x in group]
        assert_that(sorted(flattened) == data, f"every element appears exactly once: {groups}")
        for key, members in groups.items():
            assert_that(all(key_fn(x) == key for x in members), f"members of {key} share the key")


@test("grouping_by accepts a custom map factory")
def test_grouping_by_map_factory():
    from collections import OrderedDict
    groups = of(1, 2, 3).to.collect(C.grouping_by(lambda x: x % 2, map_factory=OrderedDict))
    assert_that(isinstance(groups, OrderedDict), f"factory type used: {type(groups)}")


@test("partitioning_by always has both keys")
def test_partitioning_by():
    parts = of(1, 2, 3, 4, 5).to.collect(C.partitioning_by(lambda x: x % 2 == 1))
    assert_that(parts == {True: [1, 3, 5], False: [2, 4]}, f"split: {parts}")

    only_evens = of(2, 4).to.collect(C.partitioning_by(lambda x: x % 2 == 1))
    assert_that(only_evens == {True: [], False: [2, 4]}, f"empty side still present: {only_evens}")

    nothing = empty().to.collect(C.partitioning_by(lambda x: True, C.counting()))
    assert_that(nothing == {True: 0, False: 0}, f"downstream runs on empty sides: {nothing}")


# adapters

@test("mapping, filtering and flat_mapping adapt the downstream input")
def test_adapters():
    amounts = S(orders).to.collect(C.mapping(lambda o: o.amount, C.to_list()))
    assert_that(amounts == [120, 80, 45, 300, 15, 60], f"mapped: {amounts}")

    big = S(orders).to.collect(C.filtering(lambda o: o.amount >= 100, C.counting()))
    assert_that(big == 2, f"filtered count: {big}")

    letters = of('ab', '', 'c').to.collect(C.flat_mapping(list, C.to_list()))
    assert_that(letters == ['a', 'b', 'c'], f"flat mapped: {letters}")

    # filtering inside grouping keeps groups whose members were all filtered out
    big_per_region = S(orders).to.collect(
        C.grouping_by(lambda o: o.region, C.filtering(lambda o: o.amount >= 100, C.counting())))
    assert_that(big_per_region == {'north': 1, 'south': 0, 'east': 1}, f"empty groups kept: {big_per_region}")


@test("collecting_and_then post-processes the result")
def test_collecting_and_then():
    size = of(1, 2, 3).to.collect(C.collecting_and_then(C.to_list(), len))
    assert_that(size == 3, f"finisher applied: {size}")
    frozen = of(1, 2).to.collect(C.to_list().and_then(tuple))
    assert_that(frozen == (1, 2), f"and_then: {frozen}")


@test("teeing finds cheapest and most expensive items in one pass")
def test_teeing_min_max():
    by_price = lambda item: item['price']
    result = S(items).to.collect(C.teeing(C.min_by(key=by_price), C.max_by(key=by_price),
                                          lambda lo, hi: (lo.get()['name'], hi.get()['name'])))
    assert_that(result == ('cup', 'lamp'), f"min and max: {result}")


@test("teeing traverses the stream only once")
def test_teeing_single_pass():
    pulled = []
    stream = S(iter(items)).peek(pulled.append)
    result = stream.to.collect(C.teeing(C.counting(), C.summing_int(lambda i: i['price']), lambda n, total: total / n))
    assert_that(result == 5.0, f"average price: {result}")
    assert_that(len(pulled) == 3, f"each element pulled once: {pulled}")


# reductions

@test("reducing with and without an identity")
def test_reducing():
    assert_that(of(1, 2, 3, 4).to.collect(C.reducing(lambda a, b: a + b, 0)) == 10, "with identity")
    assert_that(empty().to.collect(C.reducing(lambda a, b: a + b, 0)) == 0, "identity for empty input")
    assert_that(of(1, 2, 3, 4).to.collect(C.reducing(lambda a, b: a * b)) == Option.of(24), "option result")
    assert_that(empty().to.collect(C.reducing(lambda a, b: a * b)) == Option.empty(), "empty option")
    lengths = of('a', 'bb', 'ccc').to.collect(C.reducing(lambda a, b: a + b, 0, len))
    assert_that(lengths == 6, f"mapper applied before op: {lengths}")


@test("reducing keeps none as a value")
def test_reducing_none_value():
    result = of(None).to.collect(C.reducing(lambda a, b: a))
    assert_that(result.is_present and result.get() is None, f"present none: {result}")


@test("min_by and max_by keep the first of equal elements")
def test_min_max_by():
    pairs = [('a', 2), ('b', 1), ('c', 2), ('d', 1)]
    second = lambda p: p[1]
    assert_that(S(pairs).to.collect(C.min_by(key=second)) == Option.of(('b', 1)), "first minimum")
    assert_that(S(pairs).to.collect(C.max_by(key=second)) == Option.of(('a', 2)), "first maximum")
    assert_that(empty().to.collect(C.min_by()) == Option.empty(), "empty min")

    longest = of('kiwi', 'banana', 'fig').to.collect(C.max_by(lambda a, b: len(a) - len(b)))
    assert_that(longest == Option.of('banana'), f"comparator: {longest}")


@test("counting counts, including zero")
def test_counting():
    assert_that(S(orders).to.collect(C.counting()) == 6, "six orders")
    assert_that(empty().to.collect(C.counting()) == 0, "zero for empty input")


# numeric accumulation

@test("summing_int is exact, summing_float is compensated")
def test_summing():
    assert_that(of(10 ** 20, 1, -10 ** 20).to.collect(C.summing_int()) == 1, "exact integer sum")
    fractions = of(Fraction(1, 3), Fraction(2, 3)).to.collect(C.summing_int())
    assert_that(fractions == Fraction(1), f"the values' own arithmetic: {fractions}")
    compensated = of(1e100, 1.0, -1e100).to.collect(C.summing_float())
    assert_that(compensated == 1.0, f"compensated sum recovers the small term: {compensated}")
    assert_that(empty().to.collect(C.summing_float()) == 0.0, "empty float sum")


@test("compensation survives splitting and combining")
def test_summing_float_combined():
    collector = C.summing_float()
    data = [1e100, 1.0, -1e100, 2.0]
    for cut in range(len(data) + 1):
        total = split_evaluate(collector, data, cut)
        assert_that(total == 3.0, f"cut at {cut}: {total}")


@test("float sums with infinities are not nan")
def test_summing_float_infinity():
    total = of(float('inf'), 1.0).to.collect(C.summing_float())
    assert_that(total == float('inf'), f"infinite sum: {total}")


@test("averages are zero for empty input")
def test_averaging():
    assert_that(of(1, 2).to.collect(C.averaging_int()) == 1.5, "int average")
    assert_that(of(1.0, 2.0, 4.5).to.collect(C.averaging_float()) == 2.5, "float average")
    assert_that(empty().to.collect(C.averaging_int()) == 0.0, "empty int average")
    assert_that(empty().to.collect(C.averaging_float()) == 0.0, "empty float average")


@test("summarizing gives count, sum, min, max and average")
def test_summarizing():
    stats = of(3, 0, 7, 2).to.collect(C.summarizing_int())
    expected = {'count': 4, 'sum': 12, 'min': 0, 'max': 7, 'average': 3.0}
    assert_that(stats.as_dict() == expected, f"summary: {stats}")

    nothing = empty().to.collect(C.summarizing_int())
    assert_that(nothing.count == 0 and nothing.average == 0.0, f"empty summary: {nothing}")
    assert_that(nothing.min is None and nothing.max is None, "empty summary has no extremes")

    floats = of(1, 2).to.collect(C.summarizing_float())
    assert_that(floats.sum == 3.0 and isinstance(floats.min, float), f"float summary converts: {floats}")


@test("summarizing is the same however the input is split")
def test_summarizing_split():
    data = [3, 0, 7, 2, 9, -4]
    whole = C.summarizing_int().evaluate(data)
    for cut in range(len(data) + 1):
        combined = split_evaluate(C.summarizing_int(), data, cut)
        assert_that(combined == whole, f"cut at {cut}: {combined} vs {whole}")
    assert_that(SummaryStatistics().combine(SummaryStatistics()).count == 0, "combining empties")


# strings

@test("joining concatenates with delimiter, prefix and suffix")
def test_joining():
    assert_that(of('a', 'b', 'c').to.collect(C.joining(', ', '[', ']')) == '[a, b, c]', "decorated")
    assert_that(of('a', 'b').to.collect(C.joining()) == 'ab', "plain")
    assert_that(empty().to.collect(C.joining(', ', '[', ']')) == '[]', "empty input")


@test("joining rejects non-string elements")
def test_joining_non_str():
    with assert_raises(TypeError, contains="int"):
        of('a', 1).to.collect(C.joining())


# the collector contract

@test("split accumulation agrees with a single pass for built-in collectors")
def test_combiner_agrees_with_sequential():
    words = ['to', 'be', 'or', 'not', 'to', 'be']
    cases = [
        C.to_list(), C.to_tuple(), C.counting(), C.joining('-'),
        C.grouping_by(len), C.partitioning_by(lambda w: 'o' in w, C.joining()),
        C.to_map(lambda w: w, lambda w: 1, lambda a, b: a + b),
        C.teeing(C.counting(), C.to_list(), lambda n, xs: (n, xs)),
        C.min_by(key=len), C.max_by(key=len), C.reducing(lambda a, b: a + b),
    ]
    for collector in cases:
        whole = collector.evaluate(words)
        for cut in range(len(words) + 1):
            combined = split_evaluate(collector, words, cut)
            assert_that(combined == whole, f"{collector} at cut {cut}: {combined} vs {whole}")


@test("custom collectors built with Collector.of work like built-ins")
def test_custom_collector():
    # a running product that tracks how many factors it saw
    product = Collector.of(
        lambda: [1, 0],
        lambda acc, x: [acc[0] * x, acc[1] + 1],
        lambda left, right: [left[0] * right[0], left[1] + right[1]],
        lambda acc: f"{acc[1]} factors -> {acc[0]}",
    )
    assert_that(of(2, 3, 4).to.collect(product) == "3 factors -> 24", "custom finisher")
    assert_that(Characteristics.IDENTITY_FINISH not in product.characteristics, "has its own finisher")

    upper = Collector.of(list, lambda acc, s: acc + [s.upper()], lambda a, b: a + b,
                         characteristics=(Characteristics.UNORDERED,))
    assert_that(upper.unordered, "characteristics are kept")
    assert_that(of('x', 'y').to.collect(upper) == ['X', 'Y'], "functional accumulator")


if __name__ == "__main__":
    suite.main(title="sequin collectors test suite")

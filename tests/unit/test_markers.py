from docmap.markers import has_optimistic_concurrency, use_optimistic_concurrency


def test_marker_is_set_by_decorator() -> None:
    @use_optimistic_concurrency
    class Versioned:
        id: int

    assert has_optimistic_concurrency(Versioned)


def test_marker_absent_by_default() -> None:
    class Plain:
        id: int

    assert not has_optimistic_concurrency(Plain)


def test_marker_is_inherited() -> None:
    @use_optimistic_concurrency
    class Versioned:
        id: int

    class Child(Versioned):
        pass

    assert has_optimistic_concurrency(Child)

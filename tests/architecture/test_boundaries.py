from pytest_archon import archrule


def test_core_independence() -> None:
    """
    Core must not import messaging, persistence or any domain package.
    It is the foundation every service reuses.
    """
    (
        archrule("core_is_independent")
        .match("booking_core*")
        .should_not_import("booking_messaging*")
        .should_not_import("booking_persistence_sqlalchemy*")
        .should_not_import("booking_seats*")
        .check("booking_core")
    )


def test_domain_isolation() -> None:
    """
    Domain layer should be self-contained.
    It must not import from adapters, behaviors or the dispatch machinery.
    """
    (
        archrule("domain_isolation")
        .match("booking_core.domain*")
        .should_not_import("booking_core.adapters*")
        .should_not_import("booking_core.behaviors*")
        .should_not_import("booking_core.cqrs*")
        .check("booking_core")
    )


def test_primitives_isolation() -> None:
    """
    Primitives layer is the lowest level.
    It must not import anything else from the core.
    """
    (
        archrule("primitives_isolation")
        .match("booking_core.primitives*")
        .should_not_import("booking_core.domain*")
        .should_not_import("booking_core.adapters*")
        .should_not_import("booking_core.ports*")
        .should_not_import("booking_core.behaviors*")
        .should_not_import("booking_core.cqrs*")
        .check("booking_core")
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on Adapters (implementations).
    """
    (
        archrule("ports_layering")
        .match("booking_core.ports*")
        .should_not_import("booking_core.adapters*")
        .should_not_import("booking_core.behaviors*")
        .check("booking_core")
    )


def test_dispatch_is_adapter_free() -> None:
    """
    The mediator, behaviors and outbox processor work against ports only.
    """
    (
        archrule("dispatch_adapter_free")
        .match("booking_core.cqrs*")
        .match("booking_core.behaviors*")
        .should_not_import("booking_core.adapters*")
        .check("booking_core")
    )


def test_messaging_layering() -> None:
    """
    Messaging can import from Core but not from persistence or domains.
    """
    (
        archrule("messaging_layering")
        .match("booking_messaging*")
        .should_not_import("booking_persistence_sqlalchemy*")
        .should_not_import("booking_seats*")
        .check("booking_messaging")
    )


def test_persistence_layering() -> None:
    """
    Persistence layer can import from Core but not from messaging or domains.
    """
    (
        archrule("persistence_layering")
        .match("booking_persistence_sqlalchemy*")
        .should_not_import("booking_messaging*")
        .should_not_import("booking_seats*")
        .check("booking_persistence_sqlalchemy")
    )


def test_seat_domain_isolation() -> None:
    """
    The seat aggregate knows nothing about storage or the pipeline.
    """
    (
        archrule("seat_domain_isolation")
        .match("booking_seats.domain")
        .should_not_import("booking_seats.adapters*")
        .should_not_import("booking_core.adapters*")
        .should_not_import("booking_core.behaviors*")
        .should_not_import("booking_persistence_sqlalchemy*")
        .check("booking_seats")
    )

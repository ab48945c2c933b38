"""Coffeeshop bounded context — Order Lifecycle and Delivery Batching.

Orders move from placement through settlement and preparation until the
coffee is ready. Ready delivery orders are grouped into multi-order delivery
runs that a single rider carries. Uses CQRS because both lifecycles are
linear and the batching engine reads current state rather than history.
"""

from protean.domain import Domain

from coffeeshop.utils.logging import configure_logging

configure_logging()

coffeeshop = Domain(name="coffeeshop")

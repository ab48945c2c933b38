"""Delivery dispatch — commands and handler for a run out on the road."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from coffeeshop.delivery.delivery import DEFAULT_VEHICLE_TYPE, Delivery, RiderInfo
from coffeeshop.domain import coffeeshop
from coffeeshop.events import save_and_publish


@coffeeshop.command(part_of="Delivery")
class AssignRider:
    """Hand a delivery run to a rider."""

    delivery_id = Identifier(required=True)
    rider_id = String(required=True, max_length=100)
    rider_name = String(required=True, max_length=100)
    phone_number = String(required=True, max_length=30)
    vehicle_type = String(max_length=30)


@coffeeshop.command(part_of="Delivery")
class MarkDeliveryPickedUp:
    delivery_id = Identifier(required=True)


@coffeeshop.command(part_of="Delivery")
class MarkDeliveryInTransit:
    delivery_id = Identifier(required=True)


@coffeeshop.command(part_of="Delivery")
class MarkDeliveryDelivered:
    delivery_id = Identifier(required=True)


@coffeeshop.command(part_of="Delivery")
class CompleteDelivery:
    delivery_id = Identifier(required=True)


@coffeeshop.command(part_of="Delivery")
class CancelDelivery:
    delivery_id = Identifier(required=True)


@coffeeshop.command_handler(part_of=Delivery)
class DeliveryDispatchHandler:
    @handle(AssignRider)
    def assign_rider(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.assign_rider(
            RiderInfo(
                rider_id=command.rider_id,
                rider_name=command.rider_name,
                phone_number=command.phone_number,
                vehicle_type=command.vehicle_type or DEFAULT_VEHICLE_TYPE,
            )
        )
        save_and_publish(repo, delivery)

    @handle(MarkDeliveryPickedUp)
    def mark_picked_up(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.mark_as_picked_up()
        save_and_publish(repo, delivery)

    @handle(MarkDeliveryInTransit)
    def mark_in_transit(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.mark_as_in_transit()
        save_and_publish(repo, delivery)

    @handle(MarkDeliveryDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.mark_as_delivered()
        save_and_publish(repo, delivery)

    @handle(CompleteDelivery)
    def complete_delivery(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.complete()
        save_and_publish(repo, delivery)

    @handle(CancelDelivery)
    def cancel_delivery(self, command):
        repo = current_domain.repository_for(Delivery)
        delivery = repo.get(command.delivery_id)
        delivery.cancel()
        save_and_publish(repo, delivery)

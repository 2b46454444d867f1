from typing import Any, Dict, List

from delivery.models import CityDeliveryConfig, DeliverySlot


def _slot_row(slot: DeliverySlot, charge) -> Dict[str, Any]:
    return {
        "id": slot.id,
        "name": slot.name,
        "start_time": slot.start_time.strftime("%H:%M"),
        "end_time": slot.end_time.strftime("%H:%M"),
        "charge": charge,
    }


def resolve_slots(city_id) -> List[Dict[str, Any]]:
    """
    Deliverable slots for a city.

    A city with configuration rows for active slots gets its available
    configured slots, charged at the override or the slot's base charge.
    Any other city gets every active slot at base charge.
    """
    configs = list(
        CityDeliveryConfig.objects.filter(city_id=city_id, slot__is_active=True)
        .select_related("slot")
        .order_by("slot__sort_order", "slot__start_time", "slot_id")
    )
    if configs:
        return [_slot_row(config.slot, config.charge) for config in configs if config.is_available]

    return [_slot_row(slot, slot.base_charge) for slot in DeliverySlot.objects.filter(is_active=True)]

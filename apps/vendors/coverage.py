"""
Vendor coverage lifecycle: moderated VendorServiceArea requests plus the
legacy VendorPincode replace-all.

Every admin mutation sends ``events.signals.admin_action`` after it has
been applied. Transitions into ACTIVE upsert the matching VendorPincode row
so the pincode tier sees approved coverage; deactivation switches it off.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from core.exceptions import Conflict
from events.signals import admin_action
from locations.models import ServiceArea
from locations.services import (
    areas_within_radius,
    ensure_service_areas,
    existing_service_area,
    find_or_create_service_area,
)
from vendors.models import Vendor, VendorPincode, VendorServiceArea

logger = logging.getLogger(__name__)

PENDING = VendorServiceArea.STATUS_PENDING
ACTIVE = VendorServiceArea.STATUS_ACTIVE
REJECTED = VendorServiceArea.STATUS_REJECTED

ACTION_ACTIVATE = "activate"
ACTION_REJECT = "reject"
ACTION_DEACTIVATE = "deactivate"
ACTION_RECONSIDER = "reconsider"

# action -> (allowed source status, target status)
TRANSITIONS = {
    ACTION_ACTIVATE: (PENDING, ACTIVE),
    ACTION_REJECT: (PENDING, REJECTED),
    ACTION_DEACTIVATE: (ACTIVE, REJECTED),
    ACTION_RECONSIDER: (REJECTED, PENDING),
}

DEACTIVATION_REASON = "Coverage deactivated by admin."

MODE_PINCODES = "pincodes"
MODE_RADIUS = "radius"


# -------------------------
# Helpers
# -------------------------

def _audit(actor, action_type, entity_type, entity_id, vendor, field_changed="", old_value=None, new_value=None, reason=""):
    admin_action.send(
        sender=VendorServiceArea,
        actor=actor,
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        vendor=vendor,
        field_changed=field_changed,
        old_value=old_value,
        new_value=new_value,
        reason=reason,
    )


def _snapshot(coverage: VendorServiceArea) -> Dict[str, Any]:
    return {
        "status": coverage.status,
        "delivery_surcharge": str(coverage.delivery_surcharge),
        "rejection_reason": coverage.rejection_reason,
    }


def _activation_fields(actor, now) -> Dict[str, Any]:
    return {
        "status": ACTIVE,
        "is_active": True,
        "activated_at": now,
        "activated_by": actor,
        "reviewed_at": now,
        "reviewed_by": actor,
        "rejection_reason": "",
    }


def sync_vendor_pincode(coverage: VendorServiceArea) -> VendorPincode:
    """
    Upsert the VendorPincode row backing an ACTIVE coverage row.
    """
    row, _ = VendorPincode.objects.update_or_create(
        vendor_id=coverage.vendor_id,
        pincode=coverage.service_area.pincode,
        defaults={"delivery_charge": coverage.delivery_surcharge, "is_active": True},
    )
    return row


def _release_vendor_pincode(coverage: VendorServiceArea) -> None:
    pincode = coverage.service_area.pincode
    still_covered = VendorServiceArea.objects.filter(
        vendor_id=coverage.vendor_id, status=ACTIVE, service_area__pincode=pincode
    ).exists()
    if not still_covered:
        VendorPincode.objects.filter(vendor_id=coverage.vendor_id, pincode=pincode).update(is_active=False)


def get_vendor_coverage(vendor: Vendor, coverage_id) -> VendorServiceArea:
    coverage = (
        VendorServiceArea.objects.select_related("service_area", "service_area__city")
        .filter(pk=coverage_id, vendor=vendor)
        .first()
    )
    if coverage is None:
        raise NotFound("Coverage request not found for this vendor.")
    return coverage


def coverage_queryset(vendor: Vendor):
    return (
        VendorServiceArea.objects.filter(vendor=vendor)
        .select_related("service_area", "service_area__city")
        .order_by("service_area__name", "id")
    )


def available_service_areas(vendor: Vendor):
    """
    Active ServiceAreas in the vendor's city the vendor has not requested yet.
    """
    requested = VendorServiceArea.objects.filter(vendor=vendor).values_list("service_area_id", flat=True)
    return (
        ServiceArea.objects.filter(city_id=vendor.city_id, is_active=True)
        .exclude(pk__in=requested)
        .select_related("city")
        .order_by("name")
    )


def _ensure_not_requested(vendor: Vendor, area: ServiceArea) -> None:
    existing = VendorServiceArea.objects.filter(vendor=vendor, service_area=area).first()
    if existing is not None:
        raise Conflict(f"Vendor already has this area with status {existing.status}.")


def _claim_pincode_area(
    vendor: Vendor, pincode: str, area_name: Optional[str], reactivate: bool
) -> Tuple[ServiceArea, bool]:
    """
    ServiceArea for a new coverage row of ``vendor``. Must run inside the
    transaction that inserts the row.
    """
    area = existing_service_area(pincode)
    if area is not None:
        _ensure_not_requested(vendor, area)
    return find_or_create_service_area(pincode, vendor.city, area_name=area_name, reactivate=reactivate)


# -------------------------
# Admin transitions
# -------------------------

def transition_coverage(vendor: Vendor, coverage_id, action: str, actor, reason: str = "") -> VendorServiceArea:
    """
    Apply one of activate/reject/deactivate/reconsider to a coverage row of
    ``vendor``. The write only lands if the row still has the status it was
    read with; otherwise a Conflict is raised.
    """
    if action not in TRANSITIONS:
        raise ValidationError({"action": f"Unknown action '{action}'. Expected one of: {', '.join(TRANSITIONS)}."})

    coverage = get_vendor_coverage(vendor, coverage_id)
    source, target = TRANSITIONS[action]
    if coverage.status != source:
        raise ValidationError(
            {"action": f"Cannot {action} a coverage request in status {coverage.status}; it must be {source}."}
        )

    before = _snapshot(coverage)
    now = timezone.now()
    if action == ACTION_ACTIVATE:
        fields = _activation_fields(actor, now)
    elif action == ACTION_REJECT:
        fields = {
            "status": REJECTED,
            "is_active": False,
            "reviewed_at": now,
            "reviewed_by": actor,
            "rejection_reason": reason or "",
        }
    elif action == ACTION_DEACTIVATE:
        fields = {
            "status": REJECTED,
            "is_active": False,
            "reviewed_at": now,
            "reviewed_by": actor,
            "rejection_reason": DEACTIVATION_REASON,
        }
    else:
        fields = {
            "status": PENDING,
            "is_active": False,
            "requested_at": now,
            "reviewed_at": now,
            "reviewed_by": actor,
            "rejection_reason": "",
        }

    updated = VendorServiceArea.objects.filter(pk=coverage.pk, status=source).update(**fields)
    if not updated:
        raise Conflict("Coverage request was modified concurrently; reload and retry.")

    coverage.refresh_from_db()
    if target == ACTIVE:
        sync_vendor_pincode(coverage)
    elif action == ACTION_DEACTIVATE:
        _release_vendor_pincode(coverage)

    logger.info("Coverage %s: %s by user %s for vendor %s", coverage.pk, action, getattr(actor, "pk", None), vendor.pk)
    _audit(
        actor,
        f"coverage.{action}",
        "vendor_service_area",
        coverage.pk,
        vendor,
        field_changed="status",
        old_value=before,
        new_value=_snapshot(coverage),
        reason=fields["rejection_reason"] or reason or "",
    )
    return coverage


def bulk_add_coverage(vendor: Vendor, service_area_ids: Iterable[int], delivery_surcharge: Decimal, actor) -> Dict[str, Any]:
    """
    Insert ACTIVE coverage rows for every listed area the vendor does not
    already have. Rows are written one by one; a failed row is skipped.
    """
    wanted = list(dict.fromkeys(service_area_ids))
    areas = {area.pk: area for area in ServiceArea.objects.filter(pk__in=wanted)}
    missing = [pk for pk in wanted if pk not in areas]
    if missing:
        raise ValidationError({"service_area_ids": f"Unknown service areas: {', '.join(str(pk) for pk in missing)}."})

    assigned = set(
        VendorServiceArea.objects.filter(vendor=vendor, service_area_id__in=wanted).values_list("service_area_id", flat=True)
    )
    added: List[int] = []
    skipped: List[int] = []
    now = timezone.now()
    for pk in wanted:
        if pk in assigned:
            skipped.append(pk)
            continue
        try:
            with transaction.atomic():
                coverage = VendorServiceArea.objects.create(
                    vendor=vendor,
                    service_area=areas[pk],
                    delivery_surcharge=delivery_surcharge,
                    requested_at=now,
                    **_activation_fields(actor, now),
                )
                sync_vendor_pincode(coverage)
        except IntegrityError:
            logger.warning("Coverage for vendor %s area %s already exists; skipped", vendor.pk, pk)
            skipped.append(pk)
            continue
        added.append(pk)

    logger.info("Bulk-added %s coverage rows for vendor %s by user %s", len(added), vendor.pk, getattr(actor, "pk", None))
    _audit(
        actor,
        "coverage.bulk_add",
        "vendor",
        vendor.pk,
        vendor,
        field_changed="service_areas",
        new_value={"service_area_ids": added, "delivery_surcharge": str(delivery_surcharge)},
        reason=f"Bulk-added {len(added)} service areas.",
    )
    return {"added": len(added), "added_ids": added, "skipped_ids": skipped}


def create_by_pincode(
    vendor: Vendor, pincode: str, actor, area_name: Optional[str] = None, delivery_surcharge: Decimal = Decimal("0")
) -> Tuple[VendorServiceArea, ServiceArea, bool]:
    """
    Find or create the ServiceArea for ``pincode`` and link it to the vendor
    as ACTIVE coverage.
    """
    with transaction.atomic():
        area, area_created = _claim_pincode_area(vendor, pincode, area_name, reactivate=True)
        now = timezone.now()
        coverage = VendorServiceArea.objects.create(
            vendor=vendor,
            service_area=area,
            delivery_surcharge=delivery_surcharge,
            requested_at=now,
            **_activation_fields(actor, now),
        )
        sync_vendor_pincode(coverage)

    logger.info("Created ACTIVE coverage %s (pincode %s) for vendor %s", coverage.pk, pincode, vendor.pk)
    _audit(
        actor,
        "coverage.create_by_pincode",
        "vendor_service_area",
        coverage.pk,
        vendor,
        field_changed="status",
        new_value=_snapshot(coverage),
        reason=f"Linked pincode {pincode}" + (" (new area)" if area_created else ""),
    )
    return coverage, area, area_created


def bulk_activate(vendor: Vendor, actor) -> int:
    """
    Activate every PENDING coverage row of the vendor. Rows already moved
    on by another writer are not counted.
    """
    count = 0
    pending = VendorServiceArea.objects.filter(vendor=vendor, status=PENDING).select_related("service_area")
    for coverage in pending:
        now = timezone.now()
        try:
            with transaction.atomic():
                updated = VendorServiceArea.objects.filter(pk=coverage.pk, status=PENDING).update(
                    **_activation_fields(actor, now)
                )
                if updated:
                    coverage.refresh_from_db()
                    sync_vendor_pincode(coverage)
        except DatabaseError:
            logger.exception("Failed to activate coverage %s for vendor %s", coverage.pk, vendor.pk)
            continue
        if updated:
            count += 1

    logger.info("Bulk-activated %s coverage rows for vendor %s by user %s", count, vendor.pk, getattr(actor, "pk", None))
    _audit(
        actor,
        "coverage.bulk_activate",
        "vendor",
        vendor.pk,
        vendor,
        field_changed="status",
        old_value={"status": PENDING},
        new_value={"status": ACTIVE, "count": count},
        reason=f"Activated {count} pending service areas.",
    )
    return count


# -------------------------
# Vendor-facing operations
# -------------------------

def save_vendor_selection(vendor: Vendor, selections: List[Dict[str, Any]]) -> List[VendorServiceArea]:
    """
    Reconcile the vendor's desired selection set with stored rows:
    - new areas are requested as PENDING
    - PENDING rows still selected take the submitted surcharge
    - ACTIVE rows are kept as they are, selected or not
    - REJECTED rows stay rejected until an admin reconsiders them
    - PENDING or REJECTED rows no longer selected are dropped
    """
    desired: Dict[int, Decimal] = {}
    for item in selections:
        area_id = item["service_area_id"]
        if area_id in desired:
            raise ValidationError({"selections": f"Service area {area_id} is listed more than once."})
        desired[area_id] = item.get("delivery_surcharge") or Decimal("0")

    with transaction.atomic():
        existing = {row.service_area_id: row for row in VendorServiceArea.objects.filter(vendor=vendor)}

        # areas the vendor already holds keep their row even if since deactivated
        new_ids = [pk for pk in desired if pk not in existing]
        valid_ids = set(ServiceArea.objects.filter(pk__in=new_ids, is_active=True).values_list("pk", flat=True))
        invalid = [pk for pk in new_ids if pk not in valid_ids]
        if invalid:
            raise ValidationError(
                {"selections": f"Unknown or inactive service areas: {', '.join(str(pk) for pk in invalid)}."}
            )

        for area_id, surcharge in desired.items():
            row = existing.get(area_id)
            if row is None:
                VendorServiceArea.objects.create(
                    vendor=vendor, service_area_id=area_id, delivery_surcharge=surcharge, status=PENDING
                )
            elif row.status == PENDING and row.delivery_surcharge != surcharge:
                row.delivery_surcharge = surcharge
                row.save(update_fields=["delivery_surcharge"])

        dropped = [
            row.pk for area_id, row in existing.items() if area_id not in desired and row.status in (PENDING, REJECTED)
        ]
        if dropped:
            VendorServiceArea.objects.filter(pk__in=dropped).delete()

    logger.info("Vendor %s saved coverage selection (%s areas, %s dropped)", vendor.pk, len(desired), len(dropped))
    return list(coverage_queryset(vendor))


def vendor_create_area(
    vendor: Vendor, pincode: str, area_name: Optional[str] = None, delivery_surcharge: Decimal = Decimal("0")
) -> Tuple[VendorServiceArea, ServiceArea, bool]:
    """
    Vendor-initiated request for a pincode: the area is found or created
    and the coverage row starts PENDING. An area switched off by an admin
    stays inactive; only an admin can bring it back.
    """
    with transaction.atomic():
        area, area_created = _claim_pincode_area(vendor, pincode, area_name, reactivate=False)
        coverage = VendorServiceArea.objects.create(
            vendor=vendor, service_area=area, delivery_surcharge=delivery_surcharge, status=PENDING
        )
    logger.info("Vendor %s requested coverage for pincode %s (area %s)", vendor.pk, pincode, area.pk)
    return coverage, area, area_created


# -------------------------
# Legacy pincode replace-all
# -------------------------

def preview_radius(lat: float, lng: float, radius_km: float) -> Dict[str, Any]:
    matches = areas_within_radius(lat, lng, radius_km)
    pincodes = list(dict.fromkeys(area.pincode for area, _ in matches))
    return {
        "radius_km": radius_km,
        "areas": [
            {
                "id": area.pk,
                "name": area.name,
                "pincode": area.pincode,
                "city_name": area.city.name,
                "distance_km": round(dist, 2),
            }
            for area, dist in matches
        ],
        "pincodes": pincodes,
    }


def replace_vendor_pincodes(
    vendor: Vendor,
    actor,
    mode: str,
    pincodes: Optional[List[Dict[str, Any]]] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_km: Optional[float] = None,
    delivery_charge: Decimal = Decimal("0"),
) -> Dict[str, Any]:
    """
    Replace the vendor's whole VendorPincode set, either from an explicit
    pincode/charge list or from every active ServiceArea within a radius.
    Pincodes without a ServiceArea get one in the vendor's city afterwards.
    """
    if mode == MODE_RADIUS:
        if lat is None or lng is None or not radius_km:
            raise ValidationError({"radius_km": "Radius mode needs lat, lng and radius_km."})
        charges = {
            pincode: delivery_charge for pincode in preview_radius(lat, lng, radius_km)["pincodes"]
        }
    elif mode == MODE_PINCODES:
        charges = {}
        for item in pincodes or []:
            charges[item["pincode"]] = item.get("delivery_charge", delivery_charge)
    else:
        raise ValidationError({"mode": f"Unknown mode '{mode}'. Expected '{MODE_PINCODES}' or '{MODE_RADIUS}'."})

    old_pincodes = sorted(VendorPincode.objects.filter(vendor=vendor).values_list("pincode", flat=True))

    with transaction.atomic():
        VendorPincode.objects.filter(vendor=vendor).delete()
        VendorPincode.objects.bulk_create(
            [
                VendorPincode(vendor=vendor, pincode=pincode, delivery_charge=charge, is_active=True)
                for pincode, charge in charges.items()
            ]
        )
        vendor.coverage_method = Vendor.COVERAGE_RADIUS if mode == MODE_RADIUS else Vendor.COVERAGE_PINCODE
        update_fields = ["coverage_method"]
        if mode == MODE_RADIUS:
            vendor.coverage_radius_km = radius_km
            update_fields.append("coverage_radius_km")
        vendor.save(update_fields=update_fields)

    areas = ensure_service_areas(charges.keys(), vendor.city)

    logger.info(
        "Replaced pincodes for vendor %s (%s mode, %s pincodes) by user %s",
        vendor.pk,
        mode,
        len(charges),
        getattr(actor, "pk", None),
    )
    _audit(
        actor,
        "vendor_pincode.replace",
        "vendor",
        vendor.pk,
        vendor,
        field_changed="pincodes",
        old_value=old_pincodes,
        new_value=sorted(charges),
        reason=f"Replaced pincode coverage ({mode}).",
    )
    return {
        "mode": mode,
        "count": len(charges),
        "pincodes": sorted(charges),
        "areas_created": areas["created"],
        "areas_failed": areas["failed"],
    }

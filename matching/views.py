import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from patient.models import RecipientRequest

from matching.allocator import MatchAllocator
from matching.batch import BatchCoordinator
from matching.exceptions import InvalidRecord
from matching.gateways import AuditGateway, NotificationGateway
from matching.models import Match

logger = logging.getLogger(__name__)


def serialize_match(match):
    return {
        'id': match.pk,
        'donor_id': match.donor_id,
        'recipient_id': match.recipient_id,
        'organ_type': match.organ_type,
        'score': match.score,
        'status': match.status,
        'created_at': match.created_at.isoformat(),
    }


@staff_member_required
@require_GET
def find_candidates_view(request, recipient_id):
    """Ranked eligible donors for one recipient, without allocating."""
    recipient = get_object_or_404(RecipientRequest, pk=recipient_id)
    try:
        candidates = MatchAllocator().find_candidates(recipient)
    except InvalidRecord as e:
        return JsonResponse({'status': 'error', 'message': e.message}, status=400)

    return JsonResponse({
        'recipient_id': recipient.pk,
        'organ_type': recipient.required_organ,
        'candidates': [c.as_dict() for c in candidates],
    })


@staff_member_required
@require_POST
def allocate_view(request, recipient_id):
    """On-demand allocation for a single recipient."""
    recipient = get_object_or_404(RecipientRequest, pk=recipient_id)
    try:
        outcome = MatchAllocator().allocate(recipient)
    except InvalidRecord as e:
        return JsonResponse({'status': 'error', 'message': e.message}, status=400)

    if isinstance(outcome, Match):
        NotificationGateway().match_proposed(outcome)
        AuditGateway().record_allocation(outcome, request.user)
        return JsonResponse({'status': 'matched', 'match': serialize_match(outcome)}, status=201)

    status = 409 if outcome.kind == 'conflict' else 200
    return JsonResponse({'status': outcome.kind, 'message': outcome.reason}, status=status)


@staff_member_required
@require_POST
def run_batch_allocation_view(request):
    try:
        summary = BatchCoordinator().run_all(request.user)
    except PermissionDenied as e:
        logger.warning(f"Batch allocation refused for {request.user.username}")
        return JsonResponse({'status': 'error', 'message': str(e)}, status=403)

    return JsonResponse({'status': 'success', **summary.as_dict()})

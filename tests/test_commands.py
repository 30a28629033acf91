import json
from io import StringIO

import pytest
from django.contrib.auth.models import User
from django.core.management import CommandError, call_command

from matching.models import Match


pytestmark = pytest.mark.django_db


class TestRunBatchAllocation:

    def test_prints_summary(self, operator, make_donor, make_recipient):
        make_donor()
        make_recipient()
        out = StringIO()

        call_command('run_batch_allocation', operator=operator.username, stdout=out)

        output = out.getvalue()
        summary = json.loads(output[:output.rindex('}') + 1])
        assert summary['created'] == 1
        assert Match.objects.count() == 1

    def test_unknown_operator(self):
        with pytest.raises(CommandError):
            call_command('run_batch_allocation', operator='nobody', stdout=StringIO())

    def test_unauthorized_operator(self, make_donor, make_recipient):
        make_donor()
        make_recipient()
        User.objects.create_user('visitor', password='secret-pass')

        with pytest.raises(CommandError):
            call_command('run_batch_allocation', operator='visitor', stdout=StringIO())
        assert Match.objects.count() == 0


class TestRecalculateMatchScores:

    def test_updates_open_matches_only(self, make_donor, make_recipient):
        donor = make_donor(organs=('blood_whole',))
        open_match = Match.objects.create(
            donor=donor, recipient=make_recipient(required_organ='blood_whole'),
            organ_type='blood_whole', renewable=True, score=0.0
        )
        closed_match = Match.objects.create(
            donor=donor, recipient=make_recipient(required_organ='blood_whole'),
            organ_type='blood_whole', renewable=True, score=0.0, status='completed'
        )

        call_command('recalculate_match_scores', stdout=StringIO())

        open_match.refresh_from_db()
        closed_match.refresh_from_db()
        assert open_match.score > 0
        assert closed_match.score == 0.0

    def test_dry_run_saves_nothing(self, make_donor, make_recipient):
        match = Match.objects.create(
            donor=make_donor(), recipient=make_recipient(),
            organ_type='kidney', renewable=False, score=0.0
        )
        out = StringIO()

        call_command('recalculate_match_scores', dry_run=True, stdout=out)

        match.refresh_from_db()
        assert match.score == 0.0
        assert '1 match score(s) would be updated' in out.getvalue()

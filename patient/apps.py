from django.apps import AppConfig


class PatientConfig(AppConfig):
    name = 'patient'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        from django.contrib.contenttypes.fields import GenericRelation
        from donor.models import Donor
        from matching.models import Notification
        from patient.models import RecipientRequest

        for model in (Donor, RecipientRequest):
            model.add_to_class(
                'notifications',
                GenericRelation(
                    Notification,
                    content_type_field='recipient_content_type',
                    object_id_field='recipient_object_id'
                )
            )

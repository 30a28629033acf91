import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RecipientRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('patient_name', models.CharField(max_length=120)),
                ('age', models.PositiveIntegerField(blank=True, null=True)),
                ('bloodgroup', models.CharField(blank=True, choices=[('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'), ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-')], max_length=10, null=True)),
                ('required_organ', models.CharField(blank=True, choices=[('kidney', 'Kidney'), ('partial_liver', 'Partial Liver'), ('bone_marrow', 'Bone Marrow / Stem Cells'), ('blood_whole', 'Blood (Whole)'), ('blood_plasma', 'Blood (Plasma)'), ('blood_platelets', 'Blood (Platelets)'), ('partial_lung', 'Partial Lung (Rare)'), ('partial_pancreas', 'Partial Pancreas (Rare)'), ('skin', 'Skin (Medical Use)'), ('blood_vessels', 'Blood Vessels / Tissues')], max_length=30, null=True)),
                ('urgency', models.CharField(choices=[('critical', 'Critical'), ('high', 'High'), ('medium', 'Medium'), ('low', 'Low')], default='medium', max_length=20)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('documents_verified', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('under_review', 'Under Review'), ('verified', 'Verified'), ('matched', 'Matched'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='recipient_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Recipient Request',
                'verbose_name_plural': 'Recipient Requests',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]

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
            name='Donor',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=120)),
                ('bloodgroup', models.CharField(blank=True, choices=[('A+', 'A+'), ('A-', 'A-'), ('B+', 'B+'), ('B-', 'B-'), ('AB+', 'AB+'), ('AB-', 'AB-'), ('O+', 'O+'), ('O-', 'O-')], max_length=10, null=True)),
                ('age', models.PositiveIntegerField(blank=True, null=True)),
                ('state', models.CharField(blank=True, max_length=100)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('availability', models.CharField(choices=[('active', 'Active'), ('paused', 'Paused'), ('unavailable', 'Unavailable')], db_index=True, default='active', max_length=20)),
                ('documents_verified', models.BooleanField(default=False)),
                ('emergency_available', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('profile_updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('user', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Donor',
                'verbose_name_plural': 'Donors',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DonorOrgan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('organ_type', models.CharField(choices=[('kidney', 'Kidney'), ('partial_liver', 'Partial Liver'), ('bone_marrow', 'Bone Marrow / Stem Cells'), ('blood_whole', 'Blood (Whole)'), ('blood_plasma', 'Blood (Plasma)'), ('blood_platelets', 'Blood (Platelets)'), ('partial_lung', 'Partial Lung (Rare)'), ('partial_pancreas', 'Partial Pancreas (Rare)'), ('skin', 'Skin (Medical Use)'), ('blood_vessels', 'Blood Vessels / Tissues')], max_length=30)),
                ('pledged_at', models.DateTimeField(auto_now_add=True)),
                ('donor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pledges', to='donor.donor')),
            ],
            options={
                'verbose_name': 'Pledged Organ',
                'verbose_name_plural': 'Pledged Organs',
                'unique_together': {('donor', 'organ_type')},
            },
        ),
    ]

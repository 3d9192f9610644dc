import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('handle_leetcode', models.CharField(blank=True, max_length=100, null=True)),
                ('handle_codeforces', models.CharField(blank=True, max_length=100, null=True)),
                ('stats_synced_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='cp_profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='PlatformStats',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('platform', models.CharField(choices=[('leetcode', 'LeetCode'), ('codeforces', 'Codeforces')], max_length=20)),
                ('handle', models.CharField(max_length=100)),
                ('rating_current', models.IntegerField(default=0)),
                ('rating_max', models.IntegerField(default=0)),
                ('rating_history', models.JSONField(blank=True, default=list)),
                ('problems_total', models.IntegerField(default=0)),
                ('problems_solved', models.IntegerField(default=0)),
                ('problems_attempted', models.IntegerField(default=0)),
                ('solved_easy', models.IntegerField(default=0)),
                ('solved_medium', models.IntegerField(default=0)),
                ('solved_hard', models.IntegerField(default=0)),
                ('problems_by_tag', models.JSONField(blank=True, default=list)),
                ('contests_total', models.IntegerField(default=0)),
                ('contests_best_rank', models.IntegerField(blank=True, null=True)),
                ('contest_history', models.JSONField(blank=True, default=list)),
                ('submissions', models.JSONField(blank=True, default=list)),
                ('daily_activity', models.JSONField(blank=True, default=list, help_text='Sorted by date, one entry per day')),
                ('last_updated', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='platform_stats', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Platform Stats',
                'verbose_name_plural': 'Platform Stats',
                'ordering': ['user', 'platform'],
                'constraints': [models.UniqueConstraint(fields=('user', 'platform'), name='platformstats_user_platform_uniq')],
            },
        ),
    ]

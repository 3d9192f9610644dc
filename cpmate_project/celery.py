import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cpmate_project.settings')

app = Celery('cpmate_project')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

"""
WSGI config for claim_navigator project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'claim_navigator.settings')

application = get_wsgi_application()

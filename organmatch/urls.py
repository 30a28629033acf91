from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # --- DJANGO DEFAULT ADMIN URLS --- #
    path('admin/', admin.site.urls),

    # Matching engine (staff JSON endpoints)
    path('matching/', include('matching.urls')),
]

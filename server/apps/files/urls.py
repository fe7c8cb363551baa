"""URL routes for files app."""

from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('list', views.list_entries, name='list'),
    path('upload', views.upload, name='upload'),
    path('download/<str:filename>', views.download, name='download'),
    path('storage', views.storage_status, name='storage'),
    path('delete/<str:filename>', views.delete, name='delete'),
    path('mkdir', views.make_directory, name='mkdir'),
    path('rename', views.rename, name='rename'),
]

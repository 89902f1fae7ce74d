from django.urls import path
from django.contrib.auth import views as auth_views
from . import views

urlpatterns = [
    # Authentication URLs
    path('register/', views.register, name='register'),
    path('login/', auth_views.LoginView.as_view(), name='login'),
    path('logout/', auth_views.LogoutView.as_view(next_page='login'), name='logout'),
    path('profile/', views.ClientProfileView.as_view(), name='profile'),

    # Application URLs
    path('', views.landing_page, name='landing_page'),
    path('dashboard/', views.dashboard, name='dashboard'),
    path('lawyers/', views.lawyers_list, name='lawyers_list'),

    path('clients/', views.client_list, name='client_list'),
    path('clients/add/', views.client_create, name='client_create'),
    path('client/<int:pk>/', views.client_detail, name='client_detail'),
    path('client/<int:pk>/edit/', views.client_update, name='client_update'),

    path('cases/', views.case_list, name='case_list'),
    path('cases/add/', views.case_create, name='case_create'),
    path('case/<int:pk>/', views.case_detail, name='case_detail'),
    path('case/<int:pk>/edit/', views.case_update, name='case_update'),
    path('case/<int:pk>/status/', views.case_change_status, name='case_change_status'),
    path('case/<int:pk>/assign/', views.case_assign_lawyer, name='case_assign_lawyer'),
    path('case/<int:pk>/delete/', views.case_delete, name='case_delete'),

    path('documents/', views.document_list, name='document_list'),
    path('document/<int:pk>/edit/', views.document_update, name='document_update'),
    path('document/<int:pk>/status/', views.document_change_status, name='document_change_status'),
    path('document/<int:pk>/important/', views.document_toggle_important, name='document_toggle_important'),
    path('document/<int:pk>/delete/', views.document_delete, name='document_delete'),

    path('consultations/', views.consultation_list, name='consultation_list'),
    path('consultations/book/', views.consultation_create, name='consultation_create'),
    path('consultation/<int:pk>/', views.consultation_detail, name='consultation_detail'),
    path('consultation/<int:pk>/edit/', views.consultation_update, name='consultation_update'),
    path('consultation/<int:pk>/status/', views.consultation_change_status, name='consultation_change_status'),
    path('consultation/<int:pk>/assign/', views.consultation_assign, name='consultation_assign'),
    path('consultation/<int:pk>/paid/', views.consultation_mark_paid, name='consultation_mark_paid'),
    path('consultation/<int:pk>/reminder/', views.consultation_send_reminder, name='consultation_send_reminder'),
    path('consultation/<int:pk>/delete/', views.consultation_delete, name='consultation_delete'),

    path('statistics/', views.statistics_view, name='statistics'),
    path('statistics/period/', views.statistics_period, name='statistics_period'),
    path('statistics/chart/<slug:kind>/', views.statistics_chart, name='statistics_chart'),

    path('users/', views.user_list, name='user_list'),
    path('user/<int:pk>/', views.user_detail, name='user_detail'),
    path('user/<int:pk>/edit/', views.user_update, name='user_update'),
    path('user/<int:pk>/role/', views.user_change_role, name='user_change_role'),
    path('user/<int:pk>/toggle-active/', views.user_toggle_active, name='user_toggle_active'),
]

from django.urls import path
from . import views

urlpatterns = [
    path('api/health/', views.health, name='health'),
    path('api/profile/handles/', views.handles_view, name='handles'),
    path('api/stats/', views.stats_list, name='stats_list'),
    path('api/stats/fetch/', views.stats_fetch, name='stats_fetch'),
    path('api/stats/dashboard/', views.dashboard, name='dashboard'),
    path('api/stats/<str:platform>/activity/', views.daily_activity, name='daily_activity'),
    path('api/contests/upcoming/', views.upcoming_contests, name='upcoming_contests'),
    path('api/leetcode/full-rating-history/<str:username>/', views.leetcode_rating_history, name='leetcode_rating_history'),
    path('api/leetcode/<str:username>/', views.leetcode_contest_ranking, name='leetcode_contest_ranking'),
]

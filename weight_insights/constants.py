"""
Constants for the weight insights engine.
Default thresholds and the fixed guidance text tables.
"""

# Trend analysis defaults (weights in kg, windows in days)
TREND_DEFAULTS = {
    'min_data_points': 3,
    'trend_window_days': 14,
    'trend_slope_threshold': 0.1,      # kg per step, not per day
    'streak_change_threshold': 0.2,    # kg between consecutive entries
    'plateau_threshold_days': 21,
    'plateau_max_variation': 1.0,
    'significant_weight_change': 1.0,
    'rapid_change_days': 7,
    'best_week_min_gap_days': 6,
    'best_week_max_gap_days': 8,
    'prediction_margin': 10.0,
    'cache_ttl_seconds': 300.0,
    'slope_cache_size': 100,
}

# Plateau identification defaults
PLATEAU_DEFAULTS = {
    'min_plateau_days': 14,
    'strict_plateau_days': 21,
    'max_plateau_variation': 1.0,
    'max_plateau_slope': 0.05,
    'probability_slope_threshold': 0.1,
    'trend_analysis_window': 7,
    'moving_average_window': 5,
    'default_plateau_duration': 25.0,
    'cache_ttl_seconds': 60.0,
}

# Severity ladder on current plateau duration (days), highest first
SEVERITY_THRESHOLDS = {
    'SEVERE': 60,
    'MODERATE': 35,
    'MILD': 21,
}

PLATEAU_PROBABILITY_WEIGHTS = {
    'low_variation': 0.4,
    'flat_trend': 0.4,
    'duration': 0.2,
}

# Horizon label -> steps ahead
PREDICTION_HORIZONS = {
    '1_week': 7,
    '1_month': 30,
    '3_months': 90,
}

# Milestone ladders: only the first matching tier of each fires
WEIGHT_LOSS_MILESTONES = [
    (20.0, "🎉 Amazing! You've lost over 20kg!"),
    (15.0, "🎉 Fantastic! You've lost over 15kg!"),
    (10.0, "🎉 Great job! You've lost over 10kg!"),
    (5.0, "🎉 Well done! You've lost over 5kg!"),
    (2.0, "🎉 You're making progress! 2kg lost!"),
]

TRACKING_MILESTONES = [
    (365, "🏆 One year of tracking! You're dedicated!"),
    (180, "🏆 Six months of tracking! Keep it up!"),
    (90, "🏆 Three months of tracking! Great habit!"),
    (30, "🏆 One month of tracking! You're building a habit!"),
]

# Tips keyed on (recent, overall) situation
TIPS = {
    'steady_loss': [
        "💪 You're doing great! Keep up your current routine.",
        "📷 Consider taking progress photos to see visual changes.",
    ],
    'plateau_warning': [
        "⚖️ You might be hitting a plateau. Try varying your routine.",
        "🍎 Consider adjusting your calorie intake slightly.",
    ],
    'recent_gain': [
        "🎯 Focus on consistency in your diet and exercise.",
        "💧 Make sure you're staying hydrated.",
        "😴 Ensure you're getting adequate sleep.",
    ],
    'default': [
        "📈 Keep tracking your progress consistently.",
        "🎯 Set small, achievable weekly goals.",
    ],
}

INSUFFICIENT_DATA_TIPS = [
    "📊 Keep tracking your weight to unlock insights!",
    "🎯 Aim to log your weight at least 3 times to see patterns.",
    "📈 Consistent tracking leads to better insights.",
]

# Breakout strategies keyed on severity name
BREAKOUT_STRATEGIES = {
    'MILD': [
        "💪 Try adding 10-15 minutes to your workout routine",
        "🥗 Consider tracking your food intake more carefully",
        "💧 Increase your daily water intake",
        "😴 Ensure you're getting 7-8 hours of quality sleep",
    ],
    'MODERATE': [
        "🔄 Change your exercise routine - try new activities",
        "🍎 Reassess your calorie needs - they may have changed",
        "⏱️ Consider intermittent fasting (consult your doctor first)",
        "🏃 Add interval training to boost metabolism",
        "📊 Track measurements and photos - you may be gaining muscle",
    ],
    'SEVERE': [
        "👥 Consider consulting a nutritionist or trainer",
        "🔬 Get blood work to check for metabolic issues",
        "📱 Try a completely new approach to diet and exercise",
        "🧘 Focus on stress management and mental health",
        "⚖️ Take a planned diet break for 1-2 weeks",
        "🎯 Set non-scale victory goals (strength, endurance, etc.)",
    ],
}

NO_PLATEAU_STRATEGY = "🎯 Keep up your current routine to maintain progress!"

INSUFFICIENT_DATA_STRATEGIES = [
    "📊 Keep tracking your weight consistently",
    "🎯 Stay focused on your routine",
    "⏱️ Give it time - results take patience",
]

ADAPTATION_TRIGGERS = {
    'MILD': "📈 Progress slowing - this is normal, stay consistent",
    'MODERATE': "🔄 Metabolic adaptation - consider changing your approach",
    'SEVERE': "⏰ Long-term adaptation - your body may have adjusted to your routine",
}

GENERAL_TRIGGERS = [
    "🍽️ Calorie creep - portion sizes may have gradually increased",
    "💪 Muscle gain - you might be building muscle while losing fat",
    "💧 Water retention - hormones, sodium, or stress can affect weight",
    "😴 Sleep quality - poor sleep affects metabolism and hunger hormones",
]

MAX_TRIGGERS = 3

# Remaining-days buckets for the breakout estimate, checked in order
BREAKOUT_TIMEFRAMES = [
    (0, "Plateau should break soon with consistent effort"),
    (7, "Expected to break within 1 week"),
    (14, "Expected to break within 2 weeks"),
    (28, "Expected to break within 1 month"),
]
BREAKOUT_TIMEFRAME_LONGER = "May take several weeks - consider strategy changes"
BREAKOUT_NOT_APPLICABLE = "Not applicable"
BREAKOUT_INSUFFICIENT_DATA = "Continue tracking to unlock plateau analysis"

"""Fixed demo scenario, loaded without calling the AI service"""
from insightflow.models.schemas import AnalysisResult, FileCategory, UploadedFile

DEMO_RESULT = AnalysisResult.model_validate({
    "summary": (
        "Solid 18% growth in recurring revenue, but operating expenses (OpEx) rose "
        "disproportionately, squeezing net margin."
    ),
    "kpis": [
        {"label": "Annual Recurring Revenue (ARR)", "value": "$4.8M", "trend": "up"},
        {"label": "CAC (Acquisition Cost)", "value": "$340", "trend": "down"},
        {"label": "Churn Rate", "value": "2.4%", "trend": "neutral"},
        {"label": "Net Margin", "value": "12.5%", "trend": "down"}
    ],
    "insights": [
        {"type": "problem", "title": "OpEx Escalation", "description": "Infrastructure spend rose 35% last quarter."},
        {"type": "opportunity", "title": "Enterprise Expansion", "description": "Corporate segment is 60% of new revenue."},
        {"type": "info", "title": "Q4 Seasonality", "description": "Historically Q4 brings 40% of yearly sales."}
    ],
    "chartData": [
        {"name": "Jul", "value": 320},
        {"name": "Aug", "value": 350},
        {"name": "Sep", "value": 340},
        {"name": "Oct", "value": 410},
        {"name": "Nov", "value": 450},
        {"name": "Dec", "value": 580}
    ],
    "chartType": "area",
    "suggestedQuestions": [
        "How can we optimize OpEx without hurting growth?",
        "What is the revenue projection for next Q1?",
        "Detailed churn analysis by segment"
    ]
})

DEMO_FILE = UploadedFile(
    id="demo-1",
    name="Financial_Report_Q4.xlsx",
    type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    content="demo-content",
    mime_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    category=FileCategory.SPREADSHEET
)

DEMO_GREETING = (
    "I loaded a sample scenario focused on SaaS metrics. Note the pressure on net "
    "margin despite revenue growth. How can I help deepen this analysis?"
)

"""
Chart generation module using the QuickChart rendering service.
Builds Chart.js configurations for line, bar, pie and scatter charts and
dispatches LLM function calls to them. Images are rendered by QuickChart
from the URL, this module never downloads them.
"""

import html
import json
import logging
from dataclasses import dataclass
from itertools import cycle, islice
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import config
from error_handler import INVALID_ARGUMENTS_MESSAGE, UNKNOWN_FUNCTION_MESSAGE

logger = logging.getLogger('data_chat.chart_generator')

ChartConfig = Dict[str, Any]

# Default series colors (Chart.js sample palette)
LINE_COLOR = 'rgb(75, 192, 192)'
LINE_FILL = 'rgba(75, 192, 192, 0.2)'
LINE_TENSION = 0.1
BAR_COLOR = 'rgb(54, 162, 235)'
BAR_FILL = 'rgba(54, 162, 235, 0.5)'
SCATTER_COLOR = 'rgb(255, 99, 132)'

# Pie slices cycle through this palette when no colors are given
PIE_PALETTE = [
    'rgba(255, 99, 132, 0.8)',
    'rgba(54, 162, 235, 0.8)',
    'rgba(255, 206, 86, 0.8)',
    'rgba(75, 192, 192, 0.8)',
    'rgba(153, 102, 255, 0.8)',
]

TITLE_FONT_SIZE = 16


@dataclass
class RenderPayload:
    """What the chat front end displays for a chart function call."""

    html: str
    text: str


def _title_plugin(title: str) -> Dict[str, Any]:
    return {
        'display': True,
        'text': title,
        'font': {'size': TITLE_FONT_SIZE},
    }


def _legend_plugin(position: str) -> Dict[str, Any]:
    return {
        'display': True,
        'position': position,
    }


def _options(title: str, legend_position: Optional[str] = None, scales: Optional[Dict] = None) -> Dict[str, Any]:
    plugins = {'title': _title_plugin(title)}
    if legend_position:
        plugins['legend'] = _legend_plugin(legend_position)

    options = {
        'responsive': True,
        'plugins': plugins,
    }
    if scales:
        options['scales'] = scales
    return options


def create_line_chart(title: str, labels: List[str], datasets: List[Dict[str, Any]]) -> ChartConfig:
    """
    Create a line chart configuration.

    Each dataset needs a 'label' and 'data', 'color' is optional. Data
    lengths are expected to match the labels but are not checked.
    """
    return {
        'type': 'line',
        'data': {
            'labels': list(labels),
            'datasets': [
                {
                    'label': dataset['label'],
                    'data': list(dataset['data']),
                    'borderColor': dataset.get('color') or LINE_COLOR,
                    'backgroundColor': dataset.get('color') or LINE_FILL,
                    'tension': LINE_TENSION,
                }
                for dataset in datasets
            ],
        },
        'options': _options(title, legend_position='top', scales={'y': {'beginAtZero': True}}),
    }


def create_bar_chart(title: str, labels: List[str], datasets: List[Dict[str, Any]]) -> ChartConfig:
    """Create a bar chart configuration. Datasets have the same shape as for line charts."""
    return {
        'type': 'bar',
        'data': {
            'labels': list(labels),
            'datasets': [
                {
                    'label': dataset['label'],
                    'data': list(dataset['data']),
                    'backgroundColor': dataset.get('color') or BAR_FILL,
                    'borderColor': dataset.get('color') or BAR_COLOR,
                    'borderWidth': 1,
                }
                for dataset in datasets
            ],
        },
        'options': _options(title, legend_position='top', scales={'y': {'beginAtZero': True}}),
    }


def pie_colors(slice_count: int) -> List[str]:
    """Default slice colors, cycling the palette when there are more slices than colors."""
    return list(islice(cycle(PIE_PALETTE), slice_count))


def create_pie_chart(title: str, labels: List[str], data: List[float], colors: Optional[List[str]] = None) -> ChartConfig:
    """Create a pie chart configuration with one color per slice."""
    return {
        'type': 'pie',
        'data': {
            'labels': list(labels),
            'datasets': [
                {
                    'data': list(data),
                    'backgroundColor': list(colors) if colors else pie_colors(len(data)),
                },
            ],
        },
        'options': _options(title, legend_position='right'),
    }


def _point(point) -> Dict[str, float]:
    """Accept either an {x, y} mapping or an (x, y) pair."""
    if isinstance(point, dict):
        return dict(point)
    x, y = point
    return {'x': x, 'y': y}


def create_scatter_plot(title: str, datasets: List[Dict[str, Any]]) -> ChartConfig:
    """Create a scatter plot configuration. Each dataset's data is a list of {x, y} points."""
    return {
        'type': 'scatter',
        'data': {
            'datasets': [
                {
                    'label': dataset['label'],
                    'data': [_point(point) for point in dataset['data']],
                    'backgroundColor': dataset.get('color') or SCATTER_COLOR,
                }
                for dataset in datasets
            ],
        },
        'options': _options(title, scales={'x': {'type': 'linear', 'position': 'bottom'}}),
    }


def generate_quickchart_url(chart_config: ChartConfig) -> str:
    """
    Generate a QuickChart URL from a chart configuration.

    The configuration is serialized as compact JSON and percent-encoded the
    same way a browser's encodeURIComponent does, so equal configurations
    always give equal URLs.
    """
    serialized = json.dumps(chart_config, ensure_ascii=False, separators=(',', ':'))
    encoded_config = quote(serialized, safe="-_.!~*'()")
    return f"{config.quickchart_base_url}?c={encoded_config}&width={config.chart_width}&height={config.chart_height}"


# OpenAI function definitions for chart generation
CHART_FUNCTION_DEFINITIONS = [
    {
        'name': 'create_line_chart',
        'description': (
            'Creates a line chart to visualize trends over time or ordered categories. '
            'Use this when the user asks to see trends, time series, or progression.'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'title': {'type': 'string', 'description': 'The title of the chart'},
                'labels': {
                    'type': 'array',
                    'items': {'type': 'string'},
                    'description': 'The x-axis labels (e.g., dates, categories)',
                },
                'datasets': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'label': {'type': 'string', 'description': 'Dataset name'},
                            'data': {
                                'type': 'array',
                                'items': {'type': 'number'},
                                'description': 'Data points',
                            },
                            'color': {
                                'type': 'string',
                                'description': 'Line color (optional, e.g., "rgb(255, 99, 132)")',
                            },
                        },
                        'required': ['label', 'data'],
                    },
                },
            },
            'required': ['title', 'labels', 'datasets'],
        },
    },
    {
        'name': 'create_bar_chart',
        'description': (
            'Creates a bar chart to compare values across categories. '
            'Use this for comparisons, rankings, or categorical data.'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'title': {'type': 'string', 'description': 'The title of the chart'},
                'labels': {
                    'type': 'array',
                    'items': {'type': 'string'},
                    'description': 'Category labels',
                },
                'datasets': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'label': {'type': 'string', 'description': 'Dataset name'},
                            'data': {
                                'type': 'array',
                                'items': {'type': 'number'},
                                'description': 'Values for each category',
                            },
                            'color': {'type': 'string', 'description': 'Bar color (optional)'},
                        },
                        'required': ['label', 'data'],
                    },
                },
            },
            'required': ['title', 'labels', 'datasets'],
        },
    },
    {
        'name': 'create_pie_chart',
        'description': (
            'Creates a pie chart to show proportions or percentages. '
            'Use this when the user wants to see the composition or distribution of a whole.'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'title': {'type': 'string', 'description': 'The title of the chart'},
                'labels': {
                    'type': 'array',
                    'items': {'type': 'string'},
                    'description': 'Slice labels',
                },
                'data': {
                    'type': 'array',
                    'items': {'type': 'number'},
                    'description': 'Values for each slice',
                },
                'colors': {
                    'type': 'array',
                    'items': {'type': 'string'},
                    'description': 'Colors for each slice (optional)',
                },
            },
            'required': ['title', 'labels', 'data'],
        },
    },
    {
        'name': 'create_scatter_plot',
        'description': (
            'Creates a scatter plot to show the relationship between two variables. '
            'Use this for correlation analysis.'
        ),
        'parameters': {
            'type': 'object',
            'properties': {
                'title': {'type': 'string', 'description': 'The title of the chart'},
                'datasets': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {
                            'label': {'type': 'string', 'description': 'Dataset name'},
                            'data': {
                                'type': 'array',
                                'items': {
                                    'type': 'object',
                                    'properties': {
                                        'x': {'type': 'number'},
                                        'y': {'type': 'number'},
                                    },
                                },
                                'description': 'Array of {x, y} coordinates',
                            },
                            'color': {'type': 'string', 'description': 'Point color (optional)'},
                        },
                        'required': ['label', 'data'],
                    },
                },
            },
            'required': ['title', 'datasets'],
        },
    },
]

CHART_FUNCTIONS: Dict[str, Callable[..., ChartConfig]] = {
    'create_line_chart': create_line_chart,
    'create_bar_chart': create_bar_chart,
    'create_pie_chart': create_pie_chart,
    'create_scatter_plot': create_scatter_plot,
}

# Parameter names each chart function accepts, keys outside these are ignored
CHART_PARAMETERS: Dict[str, List[str]] = {
    definition['name']: list(definition['parameters']['properties'])
    for definition in CHART_FUNCTION_DEFINITIONS
}


def _chart_html(chart_url: str, title: str) -> str:
    return (
        '<div style="margin: 10px 0;">'
        f'<img src="{html.escape(chart_url)}" alt="{html.escape(title)}" '
        'style="max-width: 100%; border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.1);" />'
        '</div>'
    )


def handle_chart_function(function_name: str, args: Dict[str, Any]) -> RenderPayload:
    """
    Handle an LLM function call for chart generation.

    Argument keys the function does not declare are dropped. Unknown names
    and arguments that do not fit the builder produce an error payload
    instead of raising. Callers forward names registered
    from CHART_FUNCTION_DEFINITIONS.

    Args:
        function_name: Name of the function called
        args: Function arguments

    Returns:
        RenderPayload: HTML with the chart image and a short caption
    """
    builder = CHART_FUNCTIONS.get(function_name)
    if builder is None:
        logger.warning(f"Unknown chart function requested: {function_name}")
        return RenderPayload(html="", text=UNKNOWN_FUNCTION_MESSAGE.format(name=function_name))

    try:
        accepted = {key: value for key, value in args.items() if key in CHART_PARAMETERS[function_name]}
        chart_config = builder(**accepted)
    except (TypeError, KeyError, ValueError, AttributeError) as e:
        logger.warning(f"Invalid arguments for {function_name}: {str(e)}")
        return RenderPayload(html="", text=INVALID_ARGUMENTS_MESSAGE.format(name=function_name))

    title = str(args['title'])
    chart_url = generate_quickchart_url(chart_config)
    logger.info(f"Generated {chart_config['type']} chart: {title}")

    return RenderPayload(
        html=_chart_html(chart_url, title),
        text=f"Here's your {title}",
    )

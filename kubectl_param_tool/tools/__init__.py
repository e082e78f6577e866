from kubectl_param_tool.tools.query_params import register_query_param_tools

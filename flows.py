"""Flow profiles for the intelligence pipeline.

A flow profile is pure data: what to search for, how to lay out the
context, which persona and JSON contract to give the model, which report
shape to expect and how the report fills the persisted record. The
pipeline runs any profile the same way.

Profiles:
    briefing: Finance news briefing (single report)
    script:   Finance briefing with a long-form video script (dual tone)
    research: Most notable new AI paper of the month (discovery)
    apps:     Most creative new AI product or tool (discovery)

Queries and prompts may use $year, $month and $month_name; they are filled
in from the run date so the time filter follows the calendar.
"""

from dataclasses import dataclass, field
from datetime import date
from string import Template

from models.report import ReportSchema
from rendering import FieldSource, RecordMapping, ReportRenderer, renderer_for
from tools.context import DEFAULT_ITEM_TEMPLATE, DEFAULT_SEPARATOR
from tools.search import SearchDepth


OPERATOR_CONTEXT = """
我是“一人公司”开发者。
1. 产品：一个iOS订阅制理财App，主打极简记账和可视化。
2. 渠道：抖音金融科普号，风格是“硬核但通俗”。
"""

BRIEFING_SYSTEM_PROMPT = f"""
你是一个专业的金融内容与产品策略专家。
你的目标是根据最新的市场新闻，为我的“一人公司”提供可执行的决策建议。

我的背景：
{OPERATOR_CONTEXT}

任务：
请阅读提供的即时新闻，并输出一个严格的 JSON 格式报告。
不要输出 Markdown 标记，仅输出纯 JSON 字符串。

JSON Schema:
{{
    "top_news_summary": "一句话概括今天最重要的事",
    "tiktok_strategy": {{
        "title": "一个吸引人的抖音爆款标题",
        "hook": "视频前3秒的文案，必须制造焦虑或好奇",
        "key_point": "核心科普的一个知识点"
    }},
    "app_feature_opportunity": {{
        "insight": "这则新闻意味着用户会有什么新的记账或理财需求？",
        "action": "我应该优化App的哪个具体功能？"
    }}
}}
"""

SCRIPT_SYSTEM_PROMPT = f"""
你是一个专业的金融内容与产品策略专家，同时擅长短视频和长视频两种表达。
你的目标是根据最新的市场新闻，为我的“一人公司”提供可执行的决策建议。

我的背景：
{OPERATOR_CONTEXT}

任务：
请阅读提供的即时新闻，并输出一个严格的 JSON 格式报告。
短视频部分要有冲击力，长视频脚本要冷静、有条理。
不要输出 Markdown 标记，仅输出纯 JSON 字符串。

JSON Schema:
{{
    "top_news_summary": "一句话概括今天最重要的事",
    "tiktok_strategy": {{
        "title": "一个吸引人的抖音爆款标题",
        "hook": "视频前3秒的文案，必须制造焦虑或好奇",
        "key_point": "核心科普的一个知识点"
    }},
    "video_script": {{
        "opening": "长视频开场（约30秒）",
        "body": "长视频正文，分点讲清楚来龙去脉",
        "call_to_action": "结尾引导关注或下载App的话术"
    }},
    "app_feature_opportunity": {{
        "insight": "这则新闻意味着用户会有什么新的记账或理财需求？",
        "action": "我应该优化App的哪个具体功能？"
    }}
}}
"""

RESEARCH_SYSTEM_PROMPT = """
你是一个学院派的技术顾问。从搜索结果中选出**${year}年${month}月最值得关注的一篇**技术论文或底层模型更新。
【严格时间过滤】
1. 必须是 **${year}年** 发布的。
2. 如果内容是更早年份的，**直接丢弃**。
3. 如果搜索结果里全都是旧闻，请返回 { "found": false } (不要硬编)。
仅输出纯 JSON 字符串，不要输出 Markdown 标记。
JSON Schema (如果没找到): { "found": false }
JSON Schema (如果找到): {
  "found": true,
  "title": "论文标题",
  "url": "链接",
  "summary": "学术摘要（解决了什么技术难题？）",
  "value": "技术价值（对我们开发理财Agent有什么底层启发？比如'提高了记忆力'、'降低了幻觉'）"
}
"""

APPS_SYSTEM_PROMPT = """
你是一个产品猎手。从搜索结果中找出**一个 ${year} 年新出**最具创意的 AI 新产品或工具。
【严格时间过滤】
1. 必须是 **${year}年** 新发布或重大更新的。
2. 拒绝往年的老牌工具（如 AutoGPT, BabyAGI 等旧闻）。
3. 如果没有 ${year} 年的新品，返回 { "found": false }。
仅输出纯 JSON 字符串，不要输出 Markdown 标记。
JSON Schema (没找到): { "found": false }
JSON Schema (找到): {
  "found": true,
  "name": "产品名称",
  "url": "链接",
  "feature": "它的核心功能和交互亮点是什么？",
  "inspiration": "我们可以借鉴它的什么交互细节？（比如'它的语音输入动画很棒'）"
}
"""

BRIEFING_MAPPING = RecordMapping(
    title_prefix="📅 [Briefing] ",
    title=FieldSource("tiktok_strategy.title", "今日金融简报"),
    summary=FieldSource("top_news_summary"),
    value=FieldSource("tiktok_strategy.key_point"),
    inspiration=FieldSource("app_feature_opportunity.action"),
    url=FieldSource(),
)


@dataclass(frozen=True)
class FlowProfile:
    """Everything that distinguishes one flow from another.

    Attributes:
        name: CLI name of the flow
        label: Human-readable label for the chat message header
        query: Search query (may contain $year/$month/$month_name)
        depth: Search depth ('basic' or 'advanced')
        max_results: Number of search results to request
        system_instruction: Persona and JSON contract for the model
        prompt_prefix: Text placed before the aggregated context
        schema: Expected report shape
        mapping: How the report fills the persisted record
        item_template: Per-result context template
        separator: Text between context items
    """

    name: str
    label: str
    query: str
    depth: SearchDepth
    max_results: int
    system_instruction: str
    prompt_prefix: str
    schema: ReportSchema
    mapping: RecordMapping = field(default_factory=RecordMapping)
    item_template: str = DEFAULT_ITEM_TEMPLATE
    separator: str = DEFAULT_SEPARATOR

    @property
    def renderer(self) -> ReportRenderer:
        return renderer_for(self.schema.variant)

    def _fill(self, text: str, today: date) -> str:
        return Template(text).safe_substitute(
            year=today.year,
            month=today.month,
            month_name=today.strftime("%B"),
        )

    def search_query(self, today: date) -> str:
        return self._fill(self.query, today)

    def instruction(self, today: date) -> str:
        return self._fill(self.system_instruction, today)

    def user_prompt(self, context: str) -> str:
        return f"{self.prompt_prefix}\n{context}"


BRIEFING = FlowProfile(
    name="briefing",
    label="金融行动简报",
    query="最新金融市场热点 科技股趋势 个人理财新规",
    depth="advanced",
    max_results=5,
    system_instruction=BRIEFING_SYSTEM_PROMPT,
    prompt_prefix="这是刚刚搜到的今日热点数据，请分析：",
    schema=ReportSchema.single(),
    mapping=BRIEFING_MAPPING,
    item_template="[标题] {title}\n[内容] {content}",
    separator="\n---\n",
)

SCRIPT = FlowProfile(
    name="script",
    label="金融视频脚本",
    query="最新金融市场热点 科技股趋势 个人理财新规",
    depth="advanced",
    max_results=5,
    system_instruction=SCRIPT_SYSTEM_PROMPT,
    prompt_prefix="这是刚刚搜到的今日热点数据，请分析并写出脚本：",
    schema=ReportSchema.dual_tone(),
    mapping=BRIEFING_MAPPING,
    item_template="[标题] {title}\n[内容] {content}",
    separator="\n---\n",
)

RESEARCH = FlowProfile(
    name="research",
    label="AI 论文情报",
    query="latest AI research papers arXiv $month_name $year finance reasoning",
    depth="advanced",
    max_results=7,
    system_instruction=RESEARCH_SYSTEM_PROMPT,
    prompt_prefix="搜集到的论文资讯：",
    schema=ReportSchema.discovery("title", "summary", "value"),
    mapping=RecordMapping(
        title_prefix="📑 [Paper] ",
        title=FieldSource("title", "未知条目"),
        summary=FieldSource("summary"),
        value=FieldSource("value"),
        inspiration=FieldSource(default="暂无直接应用灵感"),
        url=FieldSource("url"),
    ),
    item_template="[Date Check] {published_date} | [Title] {title} | [Content] {content}",
    separator="\n",
)

APPS = FlowProfile(
    name="apps",
    label="AI 新品情报",
    query="top trending new AI developer tools Product Hunt GitHub released $month_name $year",
    depth="advanced",
    max_results=6,
    system_instruction=APPS_SYSTEM_PROMPT,
    prompt_prefix="搜集到的产品资讯：",
    schema=ReportSchema.discovery("name", "feature", "inspiration"),
    mapping=RecordMapping(
        title_prefix="🚀 [App] ",
        title=FieldSource("name", "未知条目"),
        summary=FieldSource("feature"),
        value=FieldSource(default="参考其交互设计"),
        inspiration=FieldSource("inspiration"),
        url=FieldSource("url"),
    ),
    item_template="[{title}] {content}",
    separator="\n",
)

FLOWS: dict[str, FlowProfile] = {
    profile.name: profile for profile in (BRIEFING, SCRIPT, RESEARCH, APPS)
}


def get_flows(names: list[str]) -> list[FlowProfile]:
    """Resolve flow names to profiles, preserving order.

    Raises:
        KeyError: If a name is not a known flow
    """
    unknown = [name for name in names if name not in FLOWS]
    if unknown:
        raise KeyError(f"Unknown flow(s): {', '.join(unknown)}. Available: {', '.join(FLOWS)}")
    return [FLOWS[name] for name in names]

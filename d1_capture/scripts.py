"""
In-page JavaScript used by the page extractor

Kept as plain strings so the extractor can hand them to Playwright
unchanged.
"""

# Registered with add_init_script so it runs before any page script.
# buffered: true picks up entries recorded before the observer attached.
OBSERVER_INIT_SCRIPT = """
(() => {
  const state = { cls: 0, lcp: 0, longTasks: [] };
  Object.defineProperty(window, '__uxAudit', { value: state, configurable: true });
  const observe = (type, onEntry) => {
    try {
      new PerformanceObserver((list) => list.getEntries().forEach(onEntry))
        .observe({ type, buffered: true });
    } catch (e) {
      // Entry type unsupported in this browser
    }
  };
  observe('layout-shift', (entry) => {
    if (!entry.hadRecentInput) state.cls += entry.value;
  });
  observe('largest-contentful-paint', (entry) => {
    state.lcp = entry.renderTime || entry.loadTime || entry.startTime;
  });
  observe('longtask', (entry) => {
    state.longTasks.push({ start: entry.startTime, duration: entry.duration });
  });
})();
"""

COLLECT_METRICS_SCRIPT = """
() => {
  const state = window.__uxAudit || { cls: 0, lcp: 0, longTasks: [] };
  const nav = performance.getEntriesByType('navigation')[0];
  const paint = performance.getEntriesByName('first-contentful-paint')[0];
  const fcp = paint ? paint.startTime : 0;
  const lcp = state.lcp || fcp;
  const domInteractive = nav ? nav.domInteractive : 0;

  // Interactive once the main thread is quiet: end of the last long task after FCP
  let tti = Math.max(domInteractive, fcp);
  state.longTasks.forEach((task) => {
    if (task.start >= fcp) tti = Math.max(tti, task.start + task.duration);
  });

  let tbt = 0;
  state.longTasks.forEach((task) => {
    if (task.start >= fcp && task.start < tti) tbt += Math.max(0, task.duration - 50);
  });

  // Visual progress approximation between first and largest paint
  const speedIndex = fcp && lcp ? (fcp + lcp) / 2 : fcp;

  return {
    fcp,
    lcp,
    tti,
    tbt,
    cls: state.cls,
    speedIndex,
    longTaskCount: state.longTasks.length,
    navigation: nav ? {
      domContentLoaded: nav.domContentLoadedEventEnd,
      loadEventEnd: nav.loadEventEnd,
      responseStart: nav.responseStart,
      transferSize: nav.transferSize,
    } : null,
  };
}
"""

EXTRACT_DOM_SCRIPT = """
({ htmlLimit, styleSampleSize }) => {
  const text = (el) => (el.textContent || '').trim();

  const computedStyles = (el) => {
    const styles = window.getComputedStyle(el);
    return {
      color: styles.color,
      backgroundColor: styles.backgroundColor,
      fontSize: styles.fontSize,
      fontWeight: styles.fontWeight,
      fontFamily: styles.fontFamily,
    };
  };

  const hasLabel = (el) => {
    if (el.getAttribute('aria-label') || el.getAttribute('aria-labelledby')) return true;
    if (el.id && document.querySelector(`label[for="${CSS.escape(el.id)}"]`)) return true;
    return !!el.closest('label');
  };

  const images = Array.from(document.querySelectorAll('img')).map((img) => ({
    src: img.src,
    alt: img.alt || '',
    hasAlt: !!(img.alt && img.alt.trim()),
  }));

  const links = Array.from(document.querySelectorAll('a')).map((link) => ({
    href: link.href,
    text: text(link),
    hasText: !!(text(link) || link.getAttribute('aria-label')),
  }));

  const headings = Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6')).map((h) => ({
    tag: h.tagName.toLowerCase(),
    text: text(h),
  }));

  const buttons = Array.from(document.querySelectorAll('button, [role="button"]')).map((btn) => ({
    text: text(btn),
    ariaLabel: btn.getAttribute('aria-label') || '',
  }));

  const forms = Array.from(document.querySelectorAll('form, input, textarea, select')).map((el) => ({
    type: el.tagName.toLowerCase(),
    inputType: el.getAttribute('type') || '',
    label: el.getAttribute('aria-label') ||
      (el.previousElementSibling ? text(el.previousElementSibling) : ''),
    hasLabel: el.tagName.toLowerCase() === 'form' ? true : hasLabel(el),
    required: el.hasAttribute('required'),
  }));

  const textStyles = Array.from(
    document.querySelectorAll('p, span, div, a, button, h1, h2, h3, h4, h5, h6')
  ).slice(0, styleSampleSize).map(computedStyles);

  const meta = document.querySelector('meta[name="description"]');
  const html = document.documentElement.outerHTML;

  return {
    title: document.title || '',
    metaDescription: meta ? (meta.getAttribute('content') || '') : '',
    url: window.location.href,
    lang: document.documentElement.getAttribute('lang') || '',
    images,
    links,
    headings,
    buttons,
    forms,
    textStyles,
    hasCanonical: !!document.querySelector('link[rel="canonical"]'),
    hasOpenGraph: !!document.querySelector('meta[property^="og:"]'),
    hasStructuredData: !!document.querySelector('script[type="application/ld+json"], [itemscope]'),
    hasSemanticHTML: !!document.querySelector('header, nav, main, article, section, aside, footer'),
    htmlLength: html.length,
    html: html.substring(0, htmlLimit),
  };
}
"""
